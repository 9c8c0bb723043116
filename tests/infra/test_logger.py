"""
Tests for infra/pipeline/logger.py

Key behaviors to verify:
1. Lazy initialization - no files created until first log
2. Single append-only file per stage (no timestamps in filename)
3. JSON formatting with structured fields
4. Console-only loggers write no files
"""

import json

from infra.pipeline.logger import PipelineLogger, create_logger, console_logger


def read_lines(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


class TestPipelineLoggerLazyInit:

    def test_no_file_created_on_init(self, tmp_path):
        """Logger should not create any files on instantiation."""
        log_dir = tmp_path / "logs"

        logger = PipelineLogger(document_id="B0TEST", stage="extract", log_dir=log_dir)

        assert not log_dir.exists(), "Log directory should not be created on init"
        assert logger.log_file is None

    def test_file_created_on_first_log(self, tmp_path):
        log_dir = tmp_path / "logs"
        logger = PipelineLogger(document_id="B0TEST", stage="extract", log_dir=log_dir)

        logger.info("First message")

        assert logger.log_file.exists()
        assert logger.log_file.name == "extract.jsonl"

    def test_close_without_logging_creates_nothing(self, tmp_path):
        log_dir = tmp_path / "logs"
        logger = PipelineLogger(document_id="B0TEST", stage="extract", log_dir=log_dir)

        logger.close()

        assert not log_dir.exists()


class TestPipelineLoggerAppend:

    def test_multiple_loggers_append_to_same_file(self, tmp_path):
        log_dir = tmp_path / "logs"

        first = PipelineLogger(document_id="B0TEST", stage="transcribe", log_dir=log_dir)
        first.info("one")
        first.close()

        second = PipelineLogger(document_id="B0TEST", stage="transcribe", log_dir=log_dir)
        second.info("two")
        second.close()

        lines = read_lines(log_dir / "transcribe.jsonl")
        assert [line["message"] for line in lines] == ["one", "two"]


class TestJSONFormat:

    def test_base_fields(self, tmp_path):
        logger = create_logger("B0TEST", "extract", log_dir=tmp_path)

        logger.warning("Page did not turn")

        line = read_lines(logger.log_file)[0]
        assert line["level"] == "WARNING"
        assert line["message"] == "Page did not turn"
        assert line["document_id"] == "B0TEST"
        assert line["stage"] == "extract"
        assert "timestamp" in line

    def test_structured_fields(self, tmp_path):
        logger = create_logger("B0TEST", "transcribe", log_dir=tmp_path)

        logger.info("Retrying refusal", index=3, page=7, attempt=2, temperature=0.0, text="I'm sorry")

        line = read_lines(logger.log_file)[0]
        assert line["index"] == 3
        assert line["page"] == 7
        assert line["attempt"] == 2
        assert line["temperature"] == 0.0
        assert line["text"] == "I'm sorry"

    def test_unknown_fields_not_written(self, tmp_path):
        logger = create_logger("B0TEST", "extract", log_dir=tmp_path)

        logger.info("hello", something_else="x")

        assert "something_else" not in read_lines(logger.log_file)[0]

    def test_level_filters_debug(self, tmp_path):
        logger = create_logger("B0TEST", "extract", log_dir=tmp_path, level="INFO")

        logger.debug("hidden")
        logger.info("shown")

        assert [line["message"] for line in read_lines(logger.log_file)] == ["shown"]


class TestConsoleLogger:

    def test_writes_no_files(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        logger = console_logger("extract", document_id="batch")

        logger.info("Skipping already extracted document", page=1)

        assert list(tmp_path.iterdir()) == []
        assert "Skipping already extracted document" in capsys.readouterr().err
