"""
Test suite for logging helpers and observability middleware.

System role: Verification of structured logging and correlation IDs
"""

import logging
import uuid

from fastapi import FastAPI
from fastapi.testclient import TestClient

from vault_rag.core.exceptions import RateLimitError
from vault_rag.observability.correlation import (
    bind_vault,
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from vault_rag.observability.log_utils import log_failure, summarize_value
from vault_rag.observability.logger import RequestContextFilter
from vault_rag.observability.middleware import CORRELATION_HEADER, CorrelationMiddleware


class TestSummarizeValue:
    """summarize_value()"""

    def test_embeddings_are_reduced_to_dimension(self) -> None:
        assert summarize_value([0.1, 0.2, 0.3]) == "vector(dim=3)"

    def test_item_keys_are_previewed(self) -> None:
        keys = [("source", "a"), ("annotation", "b"), ("file", "c"), ("file", "d")]

        assert summarize_value(keys) == "[source:a, annotation:b, file:c] +1 more"
        assert summarize_value(keys[:1]) == "[source:a]"

    def test_other_values(self) -> None:
        vault_id = uuid.uuid4()

        assert summarize_value([1, 2, 3]) == "list(3 items)"
        assert summarize_value({"a": 1}) == "dict(1 keys)"
        assert summarize_value(None) == "None"
        assert summarize_value(vault_id) == str(vault_id)

    def test_long_text_is_cut(self) -> None:
        assert summarize_value("x" * 20, max_length=5) == "xxxxx...(+15 chars)"


class TestLogFailure:
    """log_failure()"""

    def test_attaches_error_fields(self, caplog) -> None:
        logger = logging.getLogger("vault_rag.tests")

        with caplog.at_level(logging.ERROR, logger="vault_rag.tests"):
            try:
                raise ValueError("bad batch")
            except ValueError as e:
                log_failure(logger, "Batch failed", e, items=[("source", "1")])

        record = caplog.records[-1]
        assert record.error_type == "ValueError"
        assert record.error_msg == "bad batch"
        assert record.items == "[source:1]"

    def test_lifts_provider_details(self, caplog) -> None:
        logger = logging.getLogger("vault_rag.tests")

        with caplog.at_level(logging.ERROR, logger="vault_rag.tests"):
            try:
                raise RateLimitError("slow down", provider="embedding", status_code=429)
            except RateLimitError as e:
                log_failure(logger, "Batch failed", e)

        record = caplog.records[-1]
        assert record.error_type == "RateLimitError"
        assert record.error_msg == "slow down"
        assert record.provider == "embedding"
        assert record.status_code == 429


class TestCorrelationMiddleware:
    """CorrelationMiddleware"""

    def _client(self) -> TestClient:
        app = FastAPI()
        app.add_middleware(CorrelationMiddleware)

        @app.get("/whoami")
        async def whoami():
            return {"correlation_id": get_correlation_id()}

        return TestClient(app)

    def test_reuses_incoming_header(self) -> None:
        response = self._client().get("/whoami", headers={CORRELATION_HEADER: "abc123"})

        assert response.headers[CORRELATION_HEADER] == "abc123"
        assert response.json() == {"correlation_id": "abc123"}

    def test_generates_id_when_absent(self) -> None:
        response = self._client().get("/whoami")

        assert len(response.headers[CORRELATION_HEADER]) == 32


class TestRequestContextFilter:
    """RequestContextFilter"""

    def _record(self) -> logging.LogRecord:
        return logging.LogRecord("vault_rag.tests", logging.INFO, __file__, 1, "msg", None, None)

    def test_attaches_bound_context(self) -> None:
        vault_id = uuid.uuid4()
        record = self._record()

        set_correlation_id("req-1")
        bind_vault(vault_id)
        try:
            RequestContextFilter("vault-rag").filter(record)
        finally:
            clear_correlation_id()

        assert record.service == "vault-rag"
        assert record.correlation_id == "req-1"
        assert record.vault_id == str(vault_id)

    def test_placeholders_outside_a_request(self) -> None:
        record = self._record()

        clear_correlation_id()
        RequestContextFilter("vault-rag").filter(record)

        assert record.correlation_id == "-"
        assert record.vault_id == "-"
