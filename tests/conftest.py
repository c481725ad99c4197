import pytest
from config.settings import GlobalSettings, WebUIConfig, OutputConfig, BatchConfig
from utils.logger import set_run_id


@pytest.fixture(autouse=True)
def reset_run_id():
    """Reset the batch run id between tests."""
    set_run_id(None)
    yield
    set_run_id(None)


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at a temp output dir with no waits."""
    return GlobalSettings(
        webui=WebUIConfig(url="http://webui.test", model_settle_delay=0),
        output=OutputConfig(dir=str(tmp_path / "output"), image_prefix="test_"),
        batch=BatchConfig(image_interval=0, item_interval=0),
    )
