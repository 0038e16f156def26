"""
Parser Configuration
=====================
Settings for one parse invocation. There are no environment variables or
config files; callers pass a ParserConfig (or rely on the defaults).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .builder.dialects import DialectName
from .markup.reader import DEFAULT_CHUNK_SIZE
from .parser.dispatcher import DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT


class ParserConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    dialect: DialectName = Field(
        DialectName.CURRENT,
        description="Tag naming convention: current (case-folded) or legacy (exact case)",
    )
    max_depth: int = Field(
        DEFAULT_MAX_DEPTH,
        ge=1,
        le=MAX_DEPTH_LIMIT,
        description="Maximum nesting of composite elements",
    )
    chunk_size: int = Field(
        DEFAULT_CHUNK_SIZE, ge=1, description="Bytes fed to the markup parser at a time"
    )
