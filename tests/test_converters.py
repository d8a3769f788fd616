"""Unit tests for the converter set.

Tests cover:
- String pattern and max length rules
- Int/Long/Float parsing, range checks and rejected input types
- The permissive boolean rule
- Date and date-time parsing with explicit, ISO and default formats
- Enum index mapping
- List conversion from sequences and separator-delimited strings
- Purity (no mutation of input, stable results)
"""

import enum
from datetime import date, datetime, timezone

import pytest

from formbind.converters import (
    ISO,
    BooleanConverter,
    DateConverter,
    DateTimeConverter,
    EnumConverter,
    FloatConverter,
    IntConverter,
    ListConverter,
    LongConverter,
    StringConverter,
)
from formbind.errors import Violation


class DemoEnum(enum.Enum):
    A = "a"
    B = "b"
    C = "c"


class TestStringConverter:
    """Test string coercion, pattern and max length."""

    def test_max_length(self):
        """Should reject strings longer than max_length."""
        con = StringConverter(max_length=10)
        assert con.convert("s", "aaabbbdddee").is_failure
        assert con.convert("s", "abc").get() == "abc"
        assert con.convert("s", "a" * 10).get() == "a" * 10

    def test_pattern_must_match_fully(self):
        """Should require the whole string to match the pattern."""
        con = StringConverter(pattern=r"\d{2}")
        assert con.convert("s", "abc").is_failure
        assert con.convert("s", "123").is_failure
        assert con.convert("s", "12").get() == "12"

    def test_stringifies_any_value(self):
        """Should accept non-string input by converting it to str."""
        con = StringConverter()
        assert con.convert("s", 12).get() == "12"

    def test_failure_names_the_field(self):
        """Should report "<name> is invalid"."""
        error = StringConverter(max_length=1).convert("title", "ab").error
        assert isinstance(error, Violation)
        assert error.field == "title"
        assert error.message == "title is invalid"


class TestIntConverter:
    """Test int parsing and range checks."""

    def test_unparseable_string(self):
        """Should fail with a typed conversion error wrapping the parse error."""
        result = IntConverter(0, 10).convert("age", "ab")
        assert result.is_failure
        assert result.error.message == "age is not an int value"
        assert isinstance(result.error.cause, ValueError)

    def test_range_is_inclusive(self):
        """Should accept both bounds and reject values outside them."""
        con = IntConverter(0, 10)
        assert con.convert("n", 11).is_failure
        assert con.convert("n", -1).is_failure
        assert con.convert("n", 10).get() == 10
        assert con.convert("n", 0).get() == 0
        assert con.convert("n", "11").is_failure

    def test_numeric_string(self):
        """Should parse numeric strings."""
        assert IntConverter(0, 10).convert("n", "8").get() == 8

    @pytest.mark.parametrize("raw", [1.5, True, None, [1], object()])
    def test_rejects_other_types(self, raw):
        """Should reject floats, booleans and other non-int input."""
        assert IntConverter().convert("n", raw).is_failure

    def test_rejects_decimal_string(self):
        """Should not truncate decimal strings."""
        assert IntConverter().convert("n", "1.5").is_failure


class TestLongConverter:
    """Test long parsing and range checks."""

    def test_unparseable_string(self):
        """Should fail on non-numeric strings."""
        result = LongConverter(0, 10).convert("n", "ab")
        assert result.error.message == "n is not a long value"

    def test_range(self):
        """Should enforce the inclusive range."""
        con = LongConverter(0, 10)
        assert con.convert("n", -1).is_failure
        assert con.convert("n", 0).get() == 0

    def test_accepts_values_beyond_int_range(self):
        """Should use the 64-bit range by default."""
        assert LongConverter().convert("n", str(2 ** 40)).get() == 2 ** 40
        assert IntConverter().convert("n", str(2 ** 40)).is_failure

    def test_rejects_booleans(self):
        """Should reject booleans even though bool subclasses int."""
        assert LongConverter(0, 10).convert("n", True).is_failure


class TestFloatConverter:
    """Test float parsing and range checks."""

    def test_unparseable_string(self):
        """Should fail on non-numeric strings."""
        result = FloatConverter(0.0, 10.0).convert("f", "ab")
        assert result.error.message == "f is not a float value"

    def test_range(self):
        """Should enforce the inclusive range."""
        con = FloatConverter(0.0, 10.0)
        assert con.convert("f", -1.0).is_failure
        assert con.convert("f", 0.0).get() == 0.0
        assert con.convert("f", "1.22").get() == pytest.approx(1.22)

    def test_widens_ints(self):
        """Should accept ints as floats."""
        value = FloatConverter().convert("f", 3).get()
        assert value == 3.0
        assert isinstance(value, float)

    @pytest.mark.parametrize("raw", ["nan", "inf", float("nan")])
    def test_rejects_non_finite(self, raw):
        """Should reject NaN and infinities under the default range."""
        assert FloatConverter().convert("f", raw).is_failure

    def test_rejects_booleans(self):
        """Should reject booleans."""
        assert FloatConverter(0.0, 10.0).convert("f", True).is_failure


class TestBooleanConverter:
    """The boolean rule is permissive truthiness, not strict parsing."""

    def test_keeps_booleans(self):
        """Should pass True and False through."""
        con = BooleanConverter()
        assert con.convert("b", True).get() is True
        assert con.convert("b", False).get() is False

    @pytest.mark.parametrize("raw", ["false", "0", 0])
    def test_false_literals(self, raw):
        """Should map "false", "0" and 0 to False."""
        assert BooleanConverter().convert("b", raw).get() is False

    @pytest.mark.parametrize("raw", ["a", 1, "true", "False", "no", "", 2.5])
    def test_everything_else_is_true(self, raw):
        """Should map every other value to True, including arbitrary strings."""
        assert BooleanConverter().convert("b", raw).get() is True


class TestDateConverter:
    """Test date parsing."""

    def test_keeps_dates(self):
        """Should return date input unchanged."""
        today = date.today()
        assert DateConverter("%Y-%m-%d").convert("d", today).get() == today

    def test_parses_with_format(self):
        """Should parse strings with the configured format only."""
        con = DateConverter("%Y/%m-%d")
        assert con.convert("d", "2022/06-18").get() == date(2022, 6, 18)
        result = con.convert("d", "2022-06-18")
        assert result.is_failure
        assert result.error.message == "d is not in date form %Y/%m-%d"

    def test_rejects_other_types(self):
        """Should reject numbers and datetimes."""
        con = DateConverter("%Y-%m-%d")
        assert con.convert("d", 0).is_failure
        assert con.convert("d", datetime(2022, 6, 18)).is_failure

    def test_default_format(self):
        """Should fall back to the settings date format."""
        assert DateConverter().convert("d", "2000-01-01").get() == date(2000, 1, 1)

    def test_iso_format(self):
        """Should parse ISO-8601 text with the ISO format."""
        assert DateConverter(ISO).convert("d", "2022-06-18").get() == date(2022, 6, 18)

    def test_with_formats_fills_unset_format(self):
        """Should substitute a default only when no format was given."""
        con = DateConverter().with_formats("%d.%m.%Y", "%d.%m.%Y %H:%M")
        assert con.convert("d", "18.06.2022").get() == date(2022, 6, 18)
        explicit = DateConverter("%Y")
        assert explicit.with_formats("%d.%m.%Y", "") is explicit


class TestDateTimeConverter:
    """Test date-time parsing."""

    def test_keeps_datetimes(self):
        """Should return datetime input unchanged."""
        now = datetime.now()
        assert DateTimeConverter("%Y").convert("t", now).get() == now

    def test_parses_with_format(self):
        """Should parse strings with the configured format only."""
        con = DateTimeConverter("%Y/%m-%d %H:%M/%S")
        assert con.convert("t", "2022/06-18 16:27/00").get() == datetime(2022, 6, 18, 16, 27, 0)
        result = con.convert("t", "2022-06-18 16:27:00")
        assert result.error.message == "t is not in date time form %Y/%m-%d %H:%M/%S"

    def test_iso_format(self):
        """Should parse offsets with the ISO format."""
        value = DateTimeConverter(ISO).convert("t", "2022-06-18T16:27:00+00:00").get()
        assert value == datetime(2022, 6, 18, 16, 27, tzinfo=timezone.utc)

    def test_rejects_other_types(self):
        """Should reject non-string, non-datetime input."""
        assert DateTimeConverter("%Y").convert("t", 0).is_failure


class TestEnumConverter:
    """Test index-based enum conversion."""

    def test_index_mapping(self):
        """Should map int and numeric-string indexes to members."""
        con = EnumConverter(DemoEnum)
        assert con.convert("e", 0).get() is DemoEnum.A
        assert con.convert("e", "1").get() is DemoEnum.B
        assert con.convert("e", 2).get() is DemoEnum.C

    @pytest.mark.parametrize("raw", [-1, 3, "3", "a", "B"])
    def test_out_of_range_or_non_numeric(self, raw):
        """Should reject indexes outside [0, N-1] and member names."""
        assert EnumConverter(DemoEnum).convert("e", raw).is_failure


class TestListConverter:
    """Test list conversion."""

    def test_sequence_and_string_agree(self):
        """Should give the same result for a list and the equivalent string."""
        con = ListConverter(IntConverter())
        assert con.convert("l", [1, "2", 3]).get() == [1, 2, 3]
        assert con.convert("l", "1, 2 ,3").get() == [1, 2, 3]
        assert con.convert("l", ("1", 2)).get() == [1, 2]

    def test_custom_separator(self):
        """Should split on the configured separator."""
        assert ListConverter(StringConverter(), ";").convert("l", "a;b").get() == ["a", "b"]

    def test_none_element_fails(self):
        """Should reject None elements in a supplied list."""
        assert ListConverter(IntConverter()).convert("l", [1, None]).is_failure

    def test_short_circuits_on_first_failure(self):
        """Should stop at the first failing element and report its error."""
        seen = []

        class Recording(IntConverter):
            def convert(self, name, raw):
                seen.append(raw)
                return super().convert(name, raw)

        result = ListConverter(Recording()).convert("l", ["1", "x", "y"])
        assert result.error.message == "l is not an int value"
        assert seen == ["1", "x"]

    def test_raw_length_cap(self):
        """Should enforce max_length on the raw string before splitting."""
        con = ListConverter(StringConverter(), max_length=5)
        assert con.convert("l", "a,b,c").get() == ["a", "b", "c"]
        assert con.convert("l", "a,b,c,d").is_failure

    def test_rejects_scalars(self):
        """Should reject input that is neither a sequence nor a string."""
        assert ListConverter(IntConverter()).convert("l", 5).is_failure


class TestPurity:
    """Converters must be pure functions of (name, raw)."""

    def test_same_input_same_result(self):
        """Should return equal results for repeated calls."""
        con = IntConverter(0, 10)
        assert con.convert("n", "5") == con.convert("n", "5")

    def test_input_not_mutated(self):
        """Should leave list input untouched."""
        raw = ["1", "2"]
        ListConverter(IntConverter()).convert("l", raw)
        assert raw == ["1", "2"]


class TestDescribe:
    """Converter metadata reflects static configuration."""

    def test_string_metadata(self):
        """Should expose pattern, length and user metadata."""
        con = StringConverter(r"\w+", 5, metadata={"doc": "login"})
        assert con.describe() == {"pattern": r"\w+", "maxLength": 5, "doc": "login"}

    def test_numeric_bounds(self):
        """Should expose the range."""
        assert IntConverter(0, 10).describe() == {"min": 0, "max": 10}

    def test_date_example(self):
        """Should expose the format and an example formatted with it."""
        meta = DateConverter("%d/%m/%Y").describe()
        assert meta["format"] == "%d/%m/%Y"
        assert datetime.strptime(meta["example"], "%d/%m/%Y")

    def test_enum_table(self):
        """Should expose the index -> member table."""
        assert EnumConverter(DemoEnum).describe()["values"] == {0: "A", 1: "B", 2: "C"}
