import pytest

from patchutils._cogs.structs.pointers import escape, join, split, unescape


@pytest.mark.parametrize('raw, escaped', [
    ('', ''),
    ('key', 'key'),
    ('example.com/owner', 'example.com~1owner'),
    ('a~b', 'a~0b'),
    ('~/', '~0~1'),
    ('/~', '~1~0'),
    ('~1', '~01'),
    ('~0', '~00'),
    ('//', '~1~1'),
])
def test_escaping(raw, escaped):
    assert escape(raw) == escaped
    assert unescape(escaped) == raw


@pytest.mark.parametrize('raw', [
    'simple', 'with-dash', 'under_score', 'dots.and.more', 'ünïcødé', '', ' ',
])
def test_identity_for_safe_strings(raw):
    assert escape(raw) == raw
    assert unescape(raw) == raw


@pytest.mark.parametrize('raw', [
    '~01', '~10', '~~//', 'a/b~c/d~', '~0~1', 'example.com/~owner~',
])
def test_unescaping_reverses_escaping(raw):
    assert unescape(escape(raw)) == raw


def test_escaped_tokens_have_no_slashes():
    assert '/' not in escape('a/b/c~/d')


def test_joining_no_tokens_is_a_whole_document():
    assert join() == ''


def test_joining_escapes_every_token():
    assert join('metadata', 'annotations', 'example.com/owner') == \
        '/metadata/annotations/example.com~1owner'


def test_splitting_empty_pointer():
    assert split('') == []


def test_splitting_unescapes_every_token():
    assert split('/metadata/annotations/example.com~1a~0b') == \
        ['metadata', 'annotations', 'example.com/a~b']


def test_splitting_reverses_joining():
    tokens = ['x/y', '~', '', 'z']
    assert split(join(*tokens)) == tokens


def test_splitting_relative_pointer_fails():
    with pytest.raises(ValueError, match=r"must start with a slash"):
        split('metadata/labels')
