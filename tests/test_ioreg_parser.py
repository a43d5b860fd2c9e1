from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from pathlib import Path

import pytest

from pycello.exceptions import CelloFormatError
from pycello.ingestion.ioreg import IORegLineParser, line_depth, parse_ioreg, parse_ioreg_async

SAMPLE = Path(__file__).parent / "fixtures" / "ioreg_sample.txt"


async def _aiter(lines: Iterable[str | bytes]) -> AsyncIterator[str | bytes]:
    for line in lines:
        yield line


def test_line_depth_counts_spaces_and_tree_guides() -> None:
    assert line_depth('      |       "Voltage" = 12448') == 14
    assert line_depth("+-o Root  <class IORegistryEntry, id 0x1, retain 26>") == 0
    assert line_depth("      |     ") is None
    assert line_depth("") is None


def test_sample_properties_carry_their_owning_object() -> None:
    with SAMPLE.open(encoding="utf-8") as fh:
        events = parse_ioreg(fh)

    battery = [e for e in events if e.obj.name == "AppleSmartBattery"]
    assert battery[0].prop.name == "TimeRemaining"
    assert battery[0].prop.value == "412"
    assert [o.name for o in battery[0].stack] == [
        "Root",
        "J314sAP",
        "AppleARMPE",
        "AppleSmartBatteryManager",
        "AppleSmartBattery",
    ]
    assert battery[0].obj.identifier.startswith("AppleSmartBattery")

    shadow = [e for e in events if e.obj.name == "AppleSmartBatteryShadow"]
    assert [o.name for o in shadow[0].stack] == ["Root", "J314sAP", "AppleARMPE", "AppleSmartBatteryShadow"]
    assert {e.prop.name for e in shadow} == {"CurrentCapacity", "IsCharging"}


def test_dictionary_values_are_passed_through_as_text() -> None:
    events = parse_ioreg(SAMPLE.read_text(encoding="utf-8").splitlines())
    by_name = {e.prop.name: e.prop.value for e in events if e.obj.name == "AppleSmartBattery"}
    assert by_name["AdapterDetails"] == '{"FamilyCode"=0}'
    assert by_name["Serial"] == '"F8Y12345ABCDEF"'


def test_bytes_lines_are_decoded() -> None:
    lines = [line.encode() + b"\n" for line in SAMPLE.read_text(encoding="utf-8").splitlines()]
    assert parse_ioreg(lines) == parse_ioreg(SAMPLE.read_text(encoding="utf-8").splitlines())


@pytest.mark.asyncio
async def test_async_parse_matches_sync_parse() -> None:
    lines = SAMPLE.read_text(encoding="utf-8").splitlines()
    assert await parse_ioreg_async(_aiter(lines)) == parse_ioreg(lines)


def test_object_line_truncates_stack_to_half_depth() -> None:
    parser = IORegLineParser()
    parser.feed("+-o A  <class X, id 0x1, retain 1>")
    parser.feed("  +-o B  <class X, id 0x2, retain 1>")
    parser.feed("    +-o C  <class X, id 0x3, retain 1>")
    assert [o.name for o in parser.stack] == ["A", "B", "C"]

    parser.feed("  +-o D  <class X, id 0x4, retain 1>")
    assert [o.name for o in parser.stack] == ["A", "D"]


def test_body_open_and_close() -> None:
    parser = IORegLineParser()
    parser.feed("+-o A  <class X, id 0x1, retain 1>")
    assert parser.feed("    {") is None
    assert parser.in_body

    event = parser.feed('      "Key" = 7')
    assert event is not None
    assert (event.obj.name, event.prop.name, event.prop.value) == ("A", "Key", "7")

    assert parser.feed("    }") is None
    assert not parser.in_body


def test_body_without_object_emits_nothing() -> None:
    assert parse_ioreg(["{", '  "Orphan" = 1', "}"]) == []


def test_unterminated_property_name_is_fatal() -> None:
    lines = ["+-o A  <class X, id 0x1, retain 1>", "  {", '    "Broken = 1']
    with pytest.raises(CelloFormatError) as exc_info:
        parse_ioreg(lines)
    assert exc_info.value.line_number == 3
    assert exc_info.value.line == '    "Broken = 1'


@pytest.mark.parametrize("line", ['    "CycleCount"', '    "Foo"=1', '    "Foo" ='])
def test_missing_property_value_is_fatal(line: str) -> None:
    lines = ["+-o AppleSmartBattery  <class AppleSmartBattery, id 0x1, retain 1>", "  {", line]
    with pytest.raises(CelloFormatError, match="Missing property value") as exc_info:
        parse_ioreg(lines)
    assert exc_info.value.line_number == 3


def test_missing_property_value_is_fatal_outside_any_object() -> None:
    with pytest.raises(CelloFormatError, match="Missing property value"):
        parse_ioreg(["{", '  "Orphan"', "}"])


def test_empty_property_value_is_allowed() -> None:
    events = parse_ioreg(["+-o A  <class X, id 0x1, retain 1>", "  {", '    "Name" = ', "  }"])
    assert [(e.prop.name, e.prop.value) for e in events] == [("Name", "")]


def test_invalid_utf8_bytes_are_a_format_error() -> None:
    lines = [b"+-o A  <class X, id 0x1, retain 1>\n", b"  {\n", b'    "N" = \xff\xfe\n']
    with pytest.raises(CelloFormatError, match="Invalid UTF-8") as exc_info:
        parse_ioreg(lines)
    assert exc_info.value.line_number == 3


@pytest.mark.asyncio
async def test_async_parse_reports_invalid_utf8_as_format_error() -> None:
    lines = [b"+-o A  <class X, id 0x1, retain 1>\n", b"  {\n", b'    "N" = \xff\xfe\n']
    with pytest.raises(CelloFormatError):
        await parse_ioreg_async(_aiter(lines))


def test_unknown_line_marker_is_fatal() -> None:
    with pytest.raises(CelloFormatError, match="Unexpected line marker"):
        parse_ioreg(["+-o A  <class X, id 0x1, retain 1>", "  * nonsense"])


def test_unterminated_object_name_is_fatal() -> None:
    with pytest.raises(CelloFormatError, match="object name"):
        parse_ioreg(["+-o Lonely"])


def test_missing_object_identifier_is_fatal() -> None:
    with pytest.raises(CelloFormatError, match="object identifier"):
        parse_ioreg(["+-o A  <class"])


@pytest.mark.asyncio
async def test_async_parse_raises_the_same_format_error() -> None:
    with pytest.raises(CelloFormatError):
        await parse_ioreg_async(_aiter(["+-o A  <class X, id 0x1, retain 1>", "  ?"]))
