"""Tests for the command line entry points."""
import asyncio
import json
import signal

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from models.batch import BatchResult
from scripts import batch_generate, check_api, generate_images


def write_config(tmp_path, data):
    path = tmp_path / "prompts.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def mock_batch_service(result):
    service = MagicMock()
    service.run_batch = AsyncMock(return_value=result)
    service.list_available_models = AsyncMock(return_value=[])
    return service


def test_missing_config_exits_without_network(tmp_path, test_settings):
    """Test a missing config exits 1 before any client is built."""
    with patch("scripts.batch_generate.BatchService") as service_cls:
        code = batch_generate.main([str(tmp_path / "missing.json")], config=test_settings)

    assert code == 1
    service_cls.assert_not_called()


def test_object_config_fails_validation(tmp_path, test_settings):
    """Test a JSON object config exits 1 naming the array constraint."""
    path = write_config(tmp_path, {"prompt": "a cat"})
    with patch("scripts.batch_generate.BatchService") as service_cls, \
            patch("scripts.batch_generate.logger") as logger:
        code = batch_generate.main([str(path)], config=test_settings)

    assert code == 1
    service_cls.assert_not_called()
    messages = " ".join(str(call.args[0]) for call in logger.error.call_args_list)
    assert "配列形式" in messages


def test_invalid_json_exits_1(tmp_path, test_settings):
    """Test a parse error exits 1."""
    path = tmp_path / "prompts.json"
    path.write_text("[", encoding="utf-8")
    with patch("scripts.batch_generate.BatchService") as service_cls:
        assert batch_generate.main([str(path)], config=test_settings) == 1
    service_cls.assert_not_called()


def test_validate_only(tmp_path, test_settings):
    """Test --validate-only never contacts the service."""
    path = write_config(tmp_path, [{"prompt": "a cat"}])
    with patch("scripts.batch_generate.BatchService") as service_cls:
        code = batch_generate.main([str(path), "--validate-only"], config=test_settings)

    assert code == 0
    service_cls.assert_not_called()


def test_batch_run_success(tmp_path, test_settings):
    """Test a completed batch exits 0."""
    path = write_config(tmp_path, [{"prompt": "a cat"}, {"prompt": "a dog"}])
    service = mock_batch_service(BatchResult(output_dir="out", total_images=2, successful_images=2))
    with patch("scripts.batch_generate.BatchService", return_value=service):
        code = batch_generate.main([str(path)], config=test_settings)

    assert code == 0
    prompts = service.run_batch.await_args.args[0]
    assert [p.prompt for p in prompts] == ["a cat", "a dog"]


def test_batch_run_unreachable_exits_1(tmp_path, test_settings):
    """Test an aborted batch exits 1."""
    path = write_config(tmp_path, [{"prompt": "a cat"}])
    service = mock_batch_service(BatchResult(output_dir="out", aborted=True))
    with patch("scripts.batch_generate.BatchService", return_value=service):
        assert batch_generate.main([str(path)], config=test_settings) == 1


def test_batch_run_unexpected_error_exits_1(tmp_path, test_settings):
    """Test unexpected failures exit 1, with a stack trace when verbose."""
    path = write_config(tmp_path, [{"prompt": "a cat"}])
    service = MagicMock()
    service.run_batch = AsyncMock(side_effect=RuntimeError("boom"))
    with patch("scripts.batch_generate.BatchService", return_value=service), \
            patch("scripts.batch_generate.logger") as logger, \
            patch("scripts.batch_generate.logging_manager"):
        assert batch_generate.main([str(path), "--verbose"], config=test_settings) == 1

    logger.exception.assert_called_once()


def test_version(test_settings, capsys):
    """Test --version prints the app version."""
    with pytest.raises(SystemExit) as exc_info:
        batch_generate.main(["--version"], config=test_settings)
    assert exc_info.value.code == 0
    assert "1.0.0" in capsys.readouterr().out


def test_generate_images_runs_samples(test_settings):
    """Test the sample entry point runs the built-in prompts."""
    service = mock_batch_service(BatchResult(output_dir="out"))
    with patch("scripts.generate_images.BatchService", return_value=service):
        code = generate_images.main(["--list-models"], config=test_settings)

    assert code == 0
    service.list_available_models.assert_awaited_once()
    service.run_batch.assert_awaited_once_with(generate_images.SAMPLE_PROMPTS)
    assert len(generate_images.SAMPLE_PROMPTS) == 3


def test_check_api_unreachable(test_settings):
    """Test the API check exits 1 when the service is down."""
    adapter = MagicMock()
    adapter.check_status = AsyncMock(return_value=False)
    with patch("scripts.check_api.WebUIAdapter", return_value=adapter):
        assert check_api.main(["--no-generate"], config=test_settings) == 1
    adapter.get_available_models.assert_not_called()


def test_check_api_with_generation(test_settings):
    """Test the API check runs the generation test on request."""
    adapter = MagicMock()
    adapter.check_status = AsyncMock(return_value=True)
    adapter.get_options = AsyncMock(return_value={"sd_model_checkpoint": "a"})
    adapter.get_available_models = AsyncMock(return_value=[{"model_name": "a"}])
    adapter.get_samplers = AsyncMock(return_value=[{"name": "Euler a"}])
    adapter.generate_image = AsyncMock(return_value={"images": ["aW1n"]})
    image_service = MagicMock()
    image_service.save_image = AsyncMock(return_value="/tmp/out/test.png")

    with patch("scripts.check_api.WebUIAdapter", return_value=adapter), \
            patch("scripts.check_api.ImageService", return_value=image_service):
        assert check_api.main(["--generate"], config=test_settings) == 0

    adapter.generate_image.assert_awaited_once_with(check_api.TEST_PROMPT, "", check_api.TEST_PARAMS)
    assert image_service.save_image.await_args.args[1] == "test_image"


def test_injected_logger_config_is_applied(tmp_path, test_settings):
    """Test main() reconfigures logging from the injected settings."""
    path = write_config(tmp_path, [{"prompt": "a cat"}])
    with patch("scripts.batch_generate.logging_manager") as manager:
        assert batch_generate.main([str(path), "--validate-only"], config=test_settings) == 0

    manager.configure.assert_called_once_with(test_settings.logger, level=None)


def test_verbose_overrides_level_only(tmp_path, test_settings):
    """Test --verbose keeps the injected sinks and raises the level to DEBUG."""
    path = write_config(tmp_path, [{"prompt": "a cat"}])
    with patch("scripts.batch_generate.logging_manager") as manager:
        batch_generate.main([str(path), "--validate-only", "--verbose"], config=test_settings)

    manager.configure.assert_called_once_with(test_settings.logger, level="DEBUG")


def test_first_interrupt_requests_cancel_and_restores_default():
    """Test Ctrl+C sets the cancel event, warns, and unhooks itself."""
    loop = MagicMock()
    cancel_event = asyncio.Event()
    handler = batch_generate.make_cancel_handler(loop, cancel_event)

    with patch("scripts.batch_generate.logger") as logger:
        handler()

    assert cancel_event.is_set()
    logger.warning.assert_called_once()
    loop.remove_signal_handler.assert_called_once_with(signal.SIGINT)


@pytest.mark.asyncio
async def test_run_with_cancellation_registers_cancel_handler():
    """Test the batch receives the event the SIGINT handler sets."""
    service = mock_batch_service(BatchResult(output_dir="out"))
    loop = asyncio.get_running_loop()

    with patch.object(loop, "add_signal_handler") as add_handler, \
            patch.object(loop, "remove_signal_handler") as remove_handler:
        await batch_generate.run_with_cancellation(service, [])

        sig, handler = add_handler.call_args.args
        assert sig == signal.SIGINT
        cancel_event = service.run_batch.await_args.args[1]
        assert not cancel_event.is_set()
        with patch("scripts.batch_generate.logger"):
            handler()
        assert cancel_event.is_set()

    remove_handler.assert_called_with(signal.SIGINT)
