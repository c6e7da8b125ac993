from pathlib import Path

import pytest

from blorbgen.packing.catalog import (
    Chunk,
    ResourceCatalog,
    describe_chunk,
    is_identifier,
)
from blorbgen.packing.errors import (
    ChunkCapacityExceeded,
    DisallowedTypeForUsage,
    DuplicateCover,
    DuplicateMetadata,
    MalformedFilePath,
    UnreadableResourceFile,
    UnrecognizedExtension,
    UnrecognizedUsage,
)
from blorbgen.packing.registry import Usage


def _catalog(tmp_path: Path, **kw) -> ResourceCatalog:
    return ResourceCatalog(tmp_path, **kw)


def test_numbering_per_usage(make_control, tmp_path):
    control = make_control(
        [
            "pict a.png",
            "pict b.jpg",
            "snd theme.ogg",
            "exec story.z5",
            "snd tune.mod",
        ],
        resources=["a.png", "b.jpg", "theme.ogg", "story.z5", "tune.mod"],
    )
    catalog = ResourceCatalog.from_control_file(control)
    numbers = [(c.usage, c.type, c.resource_number) for c in catalog.chunks]
    assert numbers == [
        ("Pict", "PNG ", 3),
        ("Pict", "JPEG", 4),
        ("Snd ", "OGGV", 3),
        ("Exec", "ZCOD", 0),
        ("Snd ", "MOD ", 4),
    ]
    assert catalog.chunks[0].data == (tmp_path / "a.png").read_bytes()
    assert not catalog.is_glulx


def test_comments_and_blank_lines_are_skipped(make_control):
    control = make_control(
        [
            "; semicolon",
            "# hash",
            "! bang",
            "",
            "   \t ",
            "-> arrow",
            "pict a.png",
        ],
        resources=["a.png"],
    )
    catalog = ResourceCatalog.from_control_file(control)
    assert len(catalog.chunks) == 1
    assert catalog.chunks[0].line == 7


def test_optional_identifier(tmp_path):
    (tmp_path / "title.png").write_bytes(b"png!")
    catalog = _catalog(tmp_path)
    named = catalog.parse_entry("pict  myTitle\ttitle.png", 1)
    unnamed = catalog.parse_entry("pict title.png", 2)
    assert named.name == "myTitle"
    assert named.source == tmp_path / "title.png"
    assert unnamed.name is None
    assert [d.name for d in catalog.declarations] == ["myTitle", None]


def test_path_with_spaces(tmp_path):
    (tmp_path / "1 two.png").write_bytes(b"png!")
    catalog = _catalog(tmp_path)
    chunk = catalog.parse_entry("pict 1 two.png", 1)
    assert chunk.name is None
    assert chunk.source == tmp_path / "1 two.png"


def test_absolute_path_is_kept(tmp_path):
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    (elsewhere / "pic.png").write_bytes(b"png!")
    catalog = _catalog(tmp_path / "control_dir")
    chunk = catalog.parse_entry(f"pict {elsewhere / 'pic.png'}", 1)
    assert chunk.source == elsewhere / "pic.png"


def test_identifier_grammar():
    assert is_identifier("pic_01")
    assert is_identifier("_x")
    assert is_identifier("-dash")
    assert not is_identifier("1pic")
    assert not is_identifier("a.png")
    assert not is_identifier("")


def test_unrecognized_usage(tmp_path):
    with pytest.raises(UnrecognizedUsage) as ei:
        _catalog(tmp_path).parse_entry("blah a.png", 4)
    assert ei.value.message == "4: Illegal use 'blah'"
    assert ei.value.line == 4


def test_missing_file_name(tmp_path):
    with pytest.raises(MalformedFilePath):
        _catalog(tmp_path).parse_entry("pict", 1)
    with pytest.raises(MalformedFilePath):
        _catalog(tmp_path).parse_entry("snd   \t", 1)


def test_disallowed_type_for_usage(tmp_path):
    (tmp_path / "theme.ogg").write_bytes(b"ogg")
    with pytest.raises(DisallowedTypeForUsage) as ei:
        _catalog(tmp_path).parse_entry("pict theme.ogg", 2)
    assert "OGGV" in ei.value.message
    assert ei.value.line == 2


def test_unknown_extension(tmp_path):
    (tmp_path / "notes.txt").write_bytes(b"txt")
    with pytest.raises(UnrecognizedExtension):
        _catalog(tmp_path).parse_entry("pict notes.txt", 1)


def test_bare_identifier_is_taken_as_path(tmp_path):
    with pytest.raises(UnrecognizedExtension):
        _catalog(tmp_path).parse_entry("pict onlyName", 1)


def test_metadata_is_unindexed_and_single(tmp_path):
    (tmp_path / "info.ifiction").write_bytes(b"<x/>")
    (tmp_path / "info.png").write_bytes(b"png!")
    catalog = _catalog(tmp_path)
    chunk = catalog.parse_entry("biblio info.ifiction", 1)
    assert chunk.usage == "0"
    assert chunk.type == "IFmd"
    assert not chunk.indexable
    assert catalog.has_metadata
    with pytest.raises(DuplicateMetadata) as ei:
        catalog.parse_entry("meta info.png", 2)
    assert ei.value.line == 2


def test_metadata_type_is_forced(tmp_path):
    (tmp_path / "info.png").write_bytes(b"png!")
    chunk = _catalog(tmp_path).parse_entry("meta info.png", 1)
    assert chunk.type == "IFmd"


def test_metadata_with_unknown_extension_still_fails(tmp_path):
    (tmp_path / "info.xml").write_bytes(b"<x/>")
    with pytest.raises(UnrecognizedExtension):
        _catalog(tmp_path).parse_entry("meta info.xml", 1)


def test_cover_is_a_picture_and_single(tmp_path):
    (tmp_path / "c.png").write_bytes(b"png!")
    (tmp_path / "d.png").write_bytes(b"png!")
    catalog = _catalog(tmp_path)
    catalog.add(catalog.parse_entry("pict d.png", 1))
    chunk = catalog.parse_entry("cover c.png", 2)
    assert chunk.usage == "Pict"
    assert chunk.resource_number == 4
    assert catalog.cover.position == 1
    assert catalog.cover.resource_number == 4
    # The cover gets no declaration constant.
    assert [d.source.name for d in catalog.declarations] == ["d.png"]
    with pytest.raises(DuplicateCover):
        catalog.parse_entry("poster d.png", 3)


def test_glulx_executable_detected(tmp_path):
    (tmp_path / "story.ulx").write_bytes(b"Glul")
    catalog = _catalog(tmp_path)
    catalog.parse_entry("exec story.ulx", 1)
    assert catalog.is_glulx


def test_missing_resource_is_fatal(tmp_path):
    with pytest.raises(UnreadableResourceFile) as ei:
        _catalog(tmp_path).parse_entry("pict gone.png", 3)
    assert ei.value.message.startswith("3: can't open file")
    assert ei.value.line == 3


def test_missing_resource_is_a_warning_in_index_only_mode(tmp_path):
    (tmp_path / "here.png").write_bytes(b"png!")
    catalog = _catalog(tmp_path, index_only=True)
    catalog.read(["pict gone.png", "pict here.png"])
    assert len(catalog.warnings) == 1
    assert "gone.png" in catalog.warnings[0]
    # The missing entry still consumed a number and a declaration.
    assert [c.resource_number for c in catalog.chunks] == [4]
    assert [d.resource_number for d in catalog.declarations] == [3, 4]


def test_capacity_keeps_room_for_index(tmp_path):
    catalog = _catalog(tmp_path, max_chunks=3)
    for n in range(2):
        catalog.add(Chunk("Pict", "PNG ", 3 + n, b"x"))
    with pytest.raises(ChunkCapacityExceeded):
        catalog.add(Chunk("Pict", "PNG ", 5, b"x", line=9))


def test_counts_group_by_usage_or_type(make_control):
    control = make_control(
        ["pict a.png", "pict b.png", "snd c.ogg", "meta m.ifiction"],
        resources=["a.png", "b.png", "c.ogg", "m.ifiction"],
    )
    catalog = ResourceCatalog.from_control_file(control)
    assert catalog.counts() == {"Pict": 2, "Snd": 1, "IFmd": 1}


def test_describe_chunk():
    chunk = Chunk(Usage.SOUND.value, "OGGV", 7, b"abc")
    assert describe_chunk(chunk) == "id#0007: Use 'Snd '\tType 'OGGV'\tLength: '3'"
    assert describe_chunk(chunk, complete=False) == "id#0007: Use 'Snd '\tType 'OGGV'"


def test_non_ascii_first_word_is_part_of_the_path(tmp_path):
    assert not is_identifier("ñame")
    assert not is_identifier("x²")
    (tmp_path / "ñame pic.png").write_bytes(b"png!")
    chunk = _catalog(tmp_path).parse_entry("pict ñame pic.png", 1)
    assert chunk.name is None
    assert chunk.source == tmp_path / "ñame pic.png"
