import dataclasses
import json
import math

import pytest

from patchutils._core.patching.outcomes import SerializationError
from patchutils._core.patching.specs import encode, patch_spec


@dataclasses.dataclass
class WidgetSpec:
    size: int
    tags: list


class DictLike:
    def to_dict(self):
        return {'from': 'to_dict'}


@pytest.mark.parametrize('spec', [
    {},
    {'replicas': 3},
    {'nested': {'list': [1, 'two', None, True, 3.5]}},
    {'text': 'with "quotes" and \\ and ünïcødé'},
    [1, 2, 3],
    'scalar',
    None,
])
def test_single_replace_operation(target, applier, spec):
    outcome = patch_spec(target, applier, spec)
    assert outcome.error is None
    assert outcome.apply_fn is not None
    assert outcome.patches.as_json_patch() == [{'op': 'replace', 'path': '/spec', 'value': spec}]


def test_dataclasses_are_serialized(target, applier):
    outcome = patch_spec(target, applier, WidgetSpec(size=5, tags=['a']))
    assert outcome.patches[0].value == {'size': 5, 'tags': ['a']}


def test_objects_with_to_dict_are_serialized(target, applier):
    outcome = patch_spec(target, applier, {'inner': DictLike()})
    assert outcome.patches[0].value == {'inner': {'from': 'to_dict'}}


def test_encoder_rejects_unknown_types():
    with pytest.raises(TypeError, match=r"not JSON serializable"):
        encode(object())


def test_encoder_rejects_dataclass_types():
    with pytest.raises(TypeError):
        encode(WidgetSpec)


@pytest.mark.parametrize('spec', [
    {'x': object()},
    {'x': {1, 2}},
    {'x': math.nan},
    {'x': math.inf},
], ids=['object', 'set', 'nan', 'inf'])
def test_serialization_errors(target, applier, spec):
    outcome = patch_spec(target, applier, spec)
    assert isinstance(outcome.error, SerializationError)
    assert isinstance(outcome.error.__cause__, (TypeError, ValueError))
    assert outcome.apply_fn is None
    assert not outcome.patches
    assert not applier.called


def test_custom_spec_path(target, applier, settings):
    settings.patching.spec_path = '/data'
    outcome = patch_spec(target, applier, {'a': 'b'}, settings=settings)
    assert outcome.patches[0].path == '/data'


async def test_apply_function(target, applier):
    outcome = patch_spec(target, applier, {'a': 'b'})
    await outcome.apply_fn()
    assert applier.await_count == 1
    assert json.loads(applier.call_args[0][1]) == [
        {'op': 'replace', 'path': '/spec', 'value': {'a': 'b'}},
    ]
