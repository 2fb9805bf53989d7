import pytest

from folio.config import DEFAULT_KATEX_MACROS, FolioConfig


def test_defaults():
    config = FolioConfig()
    assert config.image_prefix == "/assets/images/"
    assert (config.youtube_width, config.youtube_height) == (720, 405)
    assert config.unresolved_marker == "??"
    assert config.katex_macros == DEFAULT_KATEX_MACROS
    # Each config gets its own copy
    config.katex_macros["\\x"] = "y"
    assert "\\x" not in FolioConfig().katex_macros


def test_from_kwargs_converts_types():
    config = FolioConfig.from_kwargs(
        {
            "youtube_width": "640",
            "bib_files": "a.bib, b.bib",
            "counter_styles": '{"footnote": "roman"}',
            "highlight_author": "D. Malyuta",
            "image_prefix": "/img/",
        }
    )
    assert config.youtube_width == 640
    assert config.bib_files == ["a.bib", "b.bib"]
    assert config.counter_styles == {"footnote": "roman"}
    assert config.highlight_author == "D. Malyuta"
    assert config.image_prefix == "/img/"

    assert FolioConfig.from_kwargs({"highlight_author": "none"}).highlight_author is None


def test_from_kwargs_rejects_bad_input():
    with pytest.raises(ValueError):
        FolioConfig.from_kwargs({"not_a_key": "x"})
    with pytest.raises(ValueError):
        FolioConfig.from_kwargs({"youtube_width": "wide"})
    with pytest.raises(ValueError):
        FolioConfig.from_kwargs({"counter_styles": "[1, 2]"})
    with pytest.raises(ValueError):
        FolioConfig.from_kwargs({"katex_macros": "{not json"})
