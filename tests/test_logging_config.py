"""
Test suite for logging_config module

Tests the JSON formatter and structured action logging.
"""

import io
import json
import logging

from online_banking.logging_config import JSONFormatter, get_logger, log_action, setup_logging


class TestJSONFormatter:
    """Test JSON log lines"""

    def test_format_plain_record(self):
        """Test that a plain record has the core fields only"""
        record = logging.LogRecord("online_banking.accounts", logging.INFO, __file__, 1,
                                   "Account created", (), None)

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["module"] == "online_banking.accounts"
        assert data["message"] == "Account created"
        assert "timestamp" in data
        assert "action" not in data

    def test_format_structured_fields(self):
        """Test that structured attributes are copied onto the line"""
        record = logging.LogRecord("online_banking.transactions", logging.WARNING, __file__, 1,
                                   "Transfer rejected", (), None)
        record.action = "transfer"
        record.account_id = "ACC1"
        record.extra = {"amount": 10}

        data = json.loads(JSONFormatter().format(record))

        assert data["action"] == "transfer"
        assert data["account_id"] == "ACC1"
        assert data["extra"] == {"amount": 10}


class TestLogAction:
    """Test structured logging through the package logger"""

    def setup_method(self):
        """Route the package logger into a buffer"""
        self.logger = setup_logging(level="INFO", logger_name="online_banking_test")
        self.stream = io.StringIO()
        self.logger.handlers[0].setStream(self.stream)

    def teardown_method(self):
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

    def lines(self):
        return [json.loads(line) for line in self.stream.getvalue().splitlines()]

    def test_log_action(self):
        """Test that an action is logged with its structured fields"""
        log_action(self.logger, "info", "Deposit posted", action="deposit",
                   account_id="ACC1", extra={"amount": 500})

        [line] = self.lines()
        assert line["message"] == "Deposit posted"
        assert line["action"] == "deposit"
        assert line["account_id"] == "ACC1"
        assert line["extra"] == {"amount": 500}
        assert "username" not in line

    def test_child_loggers_propagate(self):
        """Test that module loggers reach the configured handler"""
        child = get_logger("online_banking_test.accounts")
        log_action(child, "warning", "Login failed", action="authenticate", username="bob")

        [line] = self.lines()
        assert line["module"] == "online_banking_test.accounts"
        assert line["username"] == "bob"

    def test_level_filtering(self):
        """Test that records below the configured level are dropped"""
        log_action(self.logger, "debug", "Not shown", action="deposit")

        assert self.lines() == []

    def test_text_format(self):
        """Test the plain text format"""
        logger = setup_logging(level="INFO", logger_name="online_banking_text", log_format="text")
        stream = io.StringIO()
        logger.handlers[0].setStream(stream)
        try:
            logger.info("Account created: ACC1")
            assert "| INFO     | online_banking_text | Account created: ACC1" in stream.getvalue()
        finally:
            for handler in logger.handlers[:]:
                logger.removeHandler(handler)
