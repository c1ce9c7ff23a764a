"""Post-processing plugins that rewrite rendered HTML."""

from .blockquotes import Blockquotes
from .code_blocks import CodeBlocks
from .headings import Headings
from .images import Images
from .lists import Lists
from .tables import Tables
from .wechat_adapter import WechatAdapter

__all__ = ["Blockquotes", "CodeBlocks", "Headings", "Images", "Lists", "Tables", "WechatAdapter"]
