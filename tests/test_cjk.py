import pytest

from lesson_core.cjk import is_cjk_char, normalize_for_match


class TestIsCjkChar:
    @pytest.mark.parametrize(
        "code",
        [0x4E00, 0x9FFF, 0x3400, 0x4DBF, 0x20000, 0x2A6DF, 0x2A700, 0x2B740, 0x2B820, 0x2CEAF],
    )
    def test_range_edges_are_cjk(self, code):
        assert is_cjk_char(chr(code))

    @pytest.mark.parametrize("code", [0x4DC0, 0x33FF, 0xA000, 0x2CEB0, 0x3002, 0xFF01])
    def test_outside_ranges(self, code):
        assert not is_cjk_char(chr(code))

    def test_ascii(self):
        assert not is_cjk_char("a")

    def test_multi_char_string(self):
        assert not is_cjk_char("你好")


def test_normalize_drops_punctuation_and_space():
    assert normalize_for_match("你好！ 我很好，谢谢你。") == "你好我很好谢谢你"


def test_normalize_keeps_digits_and_letters():
    assert normalize_for_match("我有3个iPad。") == "我有3个iPad"
