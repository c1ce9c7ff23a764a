"""Shared fixtures and test configuration for pytest."""

import pytest
import structlog

from zepress.assets.catalogue import PygmentsAssetCatalogue
from zepress.config.store import InMemoryConfigStore
from zepress.core.config import Settings
from zepress.highlight.highlighter import Highlighter
from zepress.highlight.themes import ThemeResolver
from zepress.pipeline import create_pipeline

# Configure structlog before any module caches a logger
structlog.reset_defaults()
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    context_class=dict,
    cache_logger_on_first_use=False,
)


@pytest.fixture
def store():
    """Fresh in-memory plugin configuration store."""
    return InMemoryConfigStore()


@pytest.fixture
def catalogue():
    return PygmentsAssetCatalogue()


@pytest.fixture
def themes(catalogue):
    return ThemeResolver(catalogue)


@pytest.fixture
def highlighter():
    return Highlighter()


@pytest.fixture
def preview_settings():
    """Settings for the in-app preview: custom properties are kept."""
    return Settings()


@pytest.fixture
def wechat_settings():
    """Settings for the WeChat export: custom properties must be resolved."""
    return Settings(target="wechat")


@pytest.fixture
def pipeline(store, catalogue, highlighter):
    return create_pipeline(catalogue=catalogue, store=store, highlighter=highlighter)


@pytest.fixture
def sample_markdown():
    return """# Title

## First section, with a comma

Some *text* with a [link](https://example.com) and ==highlight==.

> [!tip] Remember
> Callout body

```python
def hello():
    return "world"
```

| a | b |
|---|---|
| 1 | 2 |

![A cat](cat.png)
"""
