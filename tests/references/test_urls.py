import pytest

from patchutils._cogs.structs.references import Resource, Target


@pytest.fixture(params=[True, False], ids=['namespaced', 'cluster'])
def namespaced(request):
    return request.param


def test_resource_equality_ignores_informational_fields():
    resource1 = Resource('group', 'version', 'plural', kind='Kind1', namespaced=True)
    resource2 = Resource('group', 'version', 'plural', kind='Kind2', namespaced=False)
    assert resource1 == resource2
    assert hash(resource1) == hash(resource2)
    assert resource1 != Resource('group', 'version', 'others')


def test_resource_repr():
    assert repr(Resource('group', 'v1', 'plural')) == 'plural.v1.group'
    assert repr(Resource('', 'v1', 'pods')) == 'pods.v1'


@pytest.mark.parametrize('group, version, expected', [
    ('', 'v1', 'v1'),
    ('apps', 'v1', 'apps/v1'),
    ('example.com', 'v1beta1', 'example.com/v1beta1'),
])
def test_api_version(group, version, expected):
    assert Resource(group, version, 'plural').api_version == expected


def test_url_of_a_core_v1_namespaced_object():
    resource = Resource('', 'v1', 'pods')
    url = resource.get_url(namespace='ns', name='name')
    assert url == '/api/v1/namespaces/ns/pods/name'


def test_url_of_a_core_v1_cluster_object():
    resource = Resource('', 'v1', 'namespaces', namespaced=False)
    url = resource.get_url(name='name')
    assert url == '/api/v1/namespaces/name'


def test_url_of_a_custom_namespaced_object():
    resource = Resource('example.com', 'v1', 'widgets')
    url = resource.get_url(namespace='ns', name='name')
    assert url == '/apis/example.com/v1/namespaces/ns/widgets/name'


def test_url_with_server():
    resource = Resource('example.com', 'v1', 'widgets')
    url = resource.get_url(server='https://localhost:443/', namespace='ns', name='name')
    assert url == 'https://localhost:443/apis/example.com/v1/namespaces/ns/widgets/name'


def test_url_of_a_list():
    resource = Resource('example.com', 'v1', 'widgets')
    assert resource.get_url() == '/apis/example.com/v1/widgets'


def test_url_fails_for_namespaces_of_cluster_objects():
    resource = Resource('example.com', 'v1', 'widgets', namespaced=False)
    with pytest.raises(ValueError, match=r"cannot have a namespace"):
        resource.get_url(namespace='ns', name='name')


def test_url_fails_for_namespaced_objects_without_namespaces():
    resource = Resource('example.com', 'v1', 'widgets')
    with pytest.raises(ValueError, match=r"requires a namespace"):
        resource.get_url(name='name')


def test_target_url(namespaced):
    resource = Resource('example.com', 'v1', 'widgets', namespaced=namespaced)
    target = Target(resource=resource, name='name', namespace='ns' if namespaced else None)
    expected = (
        '/apis/example.com/v1/namespaces/ns/widgets/name' if namespaced else
        '/apis/example.com/v1/widgets/name'
    )
    assert target.get_url() == expected


def test_target_str(namespaced):
    resource = Resource('example.com', 'v1', 'widgets', namespaced=namespaced)
    target = Target(resource=resource, name='name', namespace='ns' if namespaced else None)
    assert str(target) == ('ns/name' if namespaced else 'name')


def test_target_as_ref():
    resource = Resource('example.com', 'v1', 'widgets', kind='Widget')
    target = Target(resource=resource, name='name', namespace='ns')
    assert target.as_ref() == {
        'apiVersion': 'example.com/v1',
        'kind': 'Widget',
        'name': 'name',
        'namespace': 'ns',
    }
