import pytest

from slugly.helpers import DEFAULT_LENGTH, URL_SAFE_CHARS, encode, make_slug

EXAMPLE_URL = "https://www.example.com"
LONG_URL_SUFFIX = "a" * 1000
SPECIAL_CHARS = "!@#$%^&*()"

ENCODE_TEST_CASES = [
    (0, "0"),
    (1, "1"),
    (10, "A"),
    (35, "Z"),
    (36, "a"),
    (61, "z"),
    (62, "10"),
    (1000000, "4C92"),
]


# Tests encode
@pytest.mark.parametrize("number, expected", ENCODE_TEST_CASES)
def test_encode(number, expected):
    assert encode(number) == expected


def test_encode_max_value():
    max_value = len(URL_SAFE_CHARS) ** DEFAULT_LENGTH - 1
    encoded = encode(max_value)
    assert len(encoded) <= DEFAULT_LENGTH


# Tests make_slug
@pytest.mark.parametrize(
    "url",
    [
        EXAMPLE_URL,
        f"https://www.{LONG_URL_SUFFIX}.com",
        f"https://example.com/path?param=value&special={SPECIAL_CHARS}",
        "not a url at all",
    ],
)
def test_make_slug_properties(url):
    slug = make_slug(url)
    assert len(slug) == DEFAULT_LENGTH
    assert all(char in URL_SAFE_CHARS for char in slug)


def test_make_slug_consistency():
    assert make_slug(EXAMPLE_URL) == make_slug(EXAMPLE_URL)
    assert make_slug(EXAMPLE_URL, 3) == make_slug(EXAMPLE_URL, 3)


def test_make_slug_different_urls():
    assert make_slug(EXAMPLE_URL) != make_slug("https://www.example.org")


def test_make_slug_attempts_give_new_candidates():
    candidates = {make_slug(EXAMPLE_URL, attempt) for attempt in range(10)}
    assert len(candidates) == 10


def test_make_slug_non_ascii_url():
    slug = make_slug("https://例え.jp/パス?q=ü")
    assert len(slug) == DEFAULT_LENGTH
    assert slug != make_slug("https://xn--r8jz45g.jp/")
