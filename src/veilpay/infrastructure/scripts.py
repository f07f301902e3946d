"""Central registry for Redis Lua scripts used by the escrow ledger.

Each lifecycle transition commits through exactly one script, so the state
check and every balance movement happen in one indivisible step. Scripts are
registered at application startup for EVALSHA optimization.

Return Code Conventions:
    Every script returns ``{status, payload}``:

    - 0: State conflict - the record (or vault) already exists on create, or
         the record is already settled on settle. The payload holds the
         current record JSON when one exists.

    - 1: Success - the transition was applied. The payload holds the record
         JSON as stored (for sweep: the record as it was before removal).

    - 2: Missing - the record, its vault, or the signer account does not
         exist. The payload is an empty string.

    - 3: Unauthorized - the sweep caller is not the stored receiver.

    - 4: Insufficient funds - the signer cannot cover amount, deposit and fee.

    - 5: Not settled - sweep attempted before settlement.

    - 6: Vault mismatch - the vault balance differs from settled_amount.

Records are serialized by the application; scripts only decode them to read
``is_settled`` and ``receiver`` and never re-encode, so integer fields keep
their exact representation. Amounts travel as decimal strings and are moved
with INCRBY/DECRBY.
"""

ESCROW_SCRIPTS = {
    "register_account": """
        local meta_key = KEYS[1]
        local balance_key = KEYS[2]
        local account_json = ARGV[1]
        local initial_balance = ARGV[2]

        local existing = redis.call('GET', meta_key)
        if existing then
            return {0, existing}
        end
        redis.call('SET', meta_key, account_json)
        redis.call('SET', balance_key, initial_balance)
        return {1, account_json}
    """,
    "create_pay_request": """
        local record_key = KEYS[1]
        local vault_key = KEYS[2]
        local receiver_key = KEYS[3]
        local fees_key = KEYS[4]
        local record_json = ARGV[1]
        local cost = ARGV[2]
        local fee = ARGV[3]

        -- The derived address is the uniqueness check
        local existing = redis.call('GET', record_key)
        if existing then
            return {0, existing}
        end
        if redis.call('EXISTS', vault_key) == 1 then
            return {0, ''}
        end

        local balance = redis.call('GET', receiver_key)
        if not balance then
            return {2, ''}
        end
        if tonumber(balance) < tonumber(cost) then
            return {4, ''}
        end

        redis.call('DECRBY', receiver_key, cost)
        redis.call('INCRBY', fees_key, fee)
        redis.call('SET', vault_key, '0')
        redis.call('SET', record_key, record_json)
        return {1, record_json}
    """,
    "settle_pay_request": """
        local record_key = KEYS[1]
        local vault_key = KEYS[2]
        local payer_key = KEYS[3]
        local fees_key = KEYS[4]
        local settled_json = ARGV[1]
        local amount = ARGV[2]
        local fee = ARGV[3]
        local cost = ARGV[4]

        local current = redis.call('GET', record_key)
        if not current then
            return {2, ''}
        end
        if redis.call('EXISTS', vault_key) == 0 then
            return {2, ''}
        end

        local record = cjson.decode(current)
        if record.is_settled then
            return {0, current}
        end

        local balance = redis.call('GET', payer_key)
        if not balance or tonumber(balance) < tonumber(cost) then
            return {4, current}
        end

        redis.call('DECRBY', payer_key, cost)
        redis.call('INCRBY', vault_key, amount)
        redis.call('INCRBY', fees_key, fee)
        redis.call('SET', record_key, settled_json)
        return {1, settled_json}
    """,
    "sweep_pay_request": """
        local record_key = KEYS[1]
        local vault_key = KEYS[2]
        local receiver_key = KEYS[3]
        local fees_key = KEYS[4]
        local caller = ARGV[1]
        local settled_amount = ARGV[2]
        local payout = ARGV[3]
        local fee = ARGV[4]

        local current = redis.call('GET', record_key)
        if not current then
            return {2, ''}
        end

        local record = cjson.decode(current)
        if record.receiver ~= caller then
            return {3, current}
        end
        if not record.is_settled then
            return {5, current}
        end
        if redis.call('GET', vault_key) ~= settled_amount then
            return {6, current}
        end

        -- Drain vault, refund deposit minus fee, then close both accounts
        redis.call('INCRBY', receiver_key, payout)
        redis.call('INCRBY', fees_key, fee)
        redis.call('DEL', vault_key)
        redis.call('DEL', record_key)
        return {1, current}
    """,
}
