"""Unit tests for private pay request API routes."""

import unittest
from datetime import datetime, timezone
from unittest.mock import AsyncMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from veilpay.api.dependencies import get_zk_pay_request_service
from veilpay.api.routers.zk_pay_requests import router
from veilpay.application.dtos import SettlementResponseDTO, ZkPayRequestResponseDTO
from veilpay.domain.errors import (
    AmountOutOfRangeError,
    InvalidProofError,
    InvalidRangeError,
    UnauthorizedReceiverError,
    VaultMismatchError,
)

ADDRESS = "ab" * 32
ESCROW_ADDRESS = "cd" * 32


class TestZkPayRequestsRouter(unittest.TestCase):
    """Test cases for private pay requests router."""

    def setUp(self):
        """Set up test fixtures."""
        self.app = FastAPI()
        self.app.include_router(router, prefix="/api/v1")

        self.zk_response = ZkPayRequestResponseDTO(
            address=ADDRESS,
            escrow_address=ESCROW_ADDRESS,
            bump=254,
            escrow_bump=255,
            receiver="ef" * 32,
            request_id=54321,
            amount_commitment_b64="Y29tbWl0bWVudA==",
            range_proof_b64="cHJvb2Y=",
            min_amount=50_000_000,
            max_amount=200_000_000,
            ephemeral_pubkey_b64="ZXBo",
            stealth_address="01" * 32,
            storage_deposit=7_475_040,
            is_settled=False,
            is_swept=False,
            vault_balance=0,
            created_at=datetime.now(timezone.utc),
        )
        self.envelope = {"payload_b64": "e30=", "signature_b64": "c2ln"}

        self.mock_service = AsyncMock()
        self.app.dependency_overrides[get_zk_pay_request_service] = (
            lambda: self.mock_service
        )

        self.client = TestClient(self.app)

    def tearDown(self):
        """Clean up after tests."""
        self.app.dependency_overrides.clear()

    def test_create_zk_pay_request_success(self):
        self.mock_service.create_pay_request.return_value = self.zk_response

        response = self.client.post(
            "/api/v1/zk-pay-requests",
            json={"receiver_public_key_der_b64": "cmVjZWl2ZXI=", **self.envelope},
        )

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["min_amount"], 50_000_000)
        self.assertIsNone(body["settled_amount"])
        self.assertNotIn("amount", body)

    def test_create_invalid_range_returns_400(self):
        self.mock_service.create_pay_request.side_effect = InvalidRangeError(
            "min_amount exceeds max_amount"
        )

        response = self.client.post(
            "/api/v1/zk-pay-requests",
            json={"receiver_public_key_der_b64": "cmVjZWl2ZXI=", **self.envelope},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["error"], "InvalidRange")

    def test_settle_success_returns_settlement_commitment(self):
        self.mock_service.settle_pay_request.return_value = SettlementResponseDTO(
            address=ADDRESS,
            escrow_address=ESCROW_ADDRESS,
            payer="12" * 32,
            settled_amount=100_000_000,
            vault_balance=100_000_000,
            settlement_commitment_b64="c2V0dGxlbWVudA==",
        )

        response = self.client.post(
            f"/api/v1/zk-pay-requests/{ADDRESS}/settlements",
            json={"payer_public_key_der_b64": "cGF5ZXI=", **self.envelope},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json()["settlement_commitment_b64"], "c2V0dGxlbWVudA=="
        )

    def test_settle_rejections_map_to_400(self):
        for error in (
            AmountOutOfRangeError("Amount 500000000 outside bounds"),
            InvalidProofError("Amount does not open the stored commitment"),
        ):
            with self.subTest(error=error.code):
                self.mock_service.settle_pay_request.side_effect = error
                response = self.client.post(
                    f"/api/v1/zk-pay-requests/{ADDRESS}/settlements",
                    json={"payer_public_key_der_b64": "cGF5ZXI=", **self.envelope},
                )
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["detail"]["error"], error.code)

    def test_sweep_by_other_signer_forbidden(self):
        self.mock_service.sweep_pay_request.side_effect = UnauthorizedReceiverError(
            "Caller is not the receiver of this request"
        )

        response = self.client.post(
            f"/api/v1/zk-pay-requests/{ADDRESS}/sweeps",
            json={"receiver_public_key_der_b64": "cmVjZWl2ZXI=", **self.envelope},
        )

        self.assertEqual(response.status_code, 403)

    def test_sweep_vault_mismatch_returns_500(self):
        self.mock_service.sweep_pay_request.side_effect = VaultMismatchError(
            "Vault does not hold the settled amount"
        )

        response = self.client.post(
            f"/api/v1/zk-pay-requests/{ADDRESS}/sweeps",
            json={"receiver_public_key_der_b64": "cmVjZWl2ZXI=", **self.envelope},
        )

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["detail"]["error"], "VaultMismatch")


if __name__ == "__main__":
    unittest.main()
