"""Blorb container constants (tags, sizes, limits)."""

from __future__ import annotations

# IFF wrapper
FORM_TAG = "FORM"
FORMAT_TAG = "IFRS"
ID_LENGTH = 4
WRAPPER_HEADER_SIZE = 12  # FORM + size + IFRS
CHUNK_HEADER_SIZE = 8  # tag + length

# Resource index
INDEX_TAG = "RIdx"
INDEX_COUNT_SIZE = 4
INDEX_RECORD_SIZE = 12
# Index data sits right after the wrapper header and its own chunk header.
INDEX_DATA_OFFSET = WRAPPER_HEADER_SIZE + CHUNK_HEADER_SIZE

# Chunks typed FORM already carry their own IFF header (AIFF sounds).
EMBEDDED_CONTAINER_TAG = FORM_TAG

# Usage stored for chunks that exist in the container but are not indexed.
UNINDEXED = "0"

MAX_CHUNKS = 1024
MAX_U32 = 0xFFFFFFFF

# Control list syntax
COMMENT_CHARACTERS = ";.!#%&/:\\$->"
FIELD_DELIMITERS = " \t"
IDENTIFIER_SYMBOLS = "_-"

# File extensions
CONTROL_EXT = "res"
DECLARATIONS_EXT = "bli"
BLORB_EXT = "blb"
BLORB_ZCODE_EXT = "zblorb"
BLORB_GLULX_EXT = "gblorb"

__all__ = [
    "FORM_TAG",
    "FORMAT_TAG",
    "ID_LENGTH",
    "WRAPPER_HEADER_SIZE",
    "CHUNK_HEADER_SIZE",
    "INDEX_TAG",
    "INDEX_COUNT_SIZE",
    "INDEX_RECORD_SIZE",
    "INDEX_DATA_OFFSET",
    "EMBEDDED_CONTAINER_TAG",
    "UNINDEXED",
    "MAX_CHUNKS",
    "MAX_U32",
    "COMMENT_CHARACTERS",
    "FIELD_DELIMITERS",
    "IDENTIFIER_SYMBOLS",
    "CONTROL_EXT",
    "DECLARATIONS_EXT",
    "BLORB_EXT",
    "BLORB_ZCODE_EXT",
    "BLORB_GLULX_EXT",
]
