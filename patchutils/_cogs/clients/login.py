"""
Discovery of the credentials: in-cluster (a service account) or via kubeconfig.

Only the static credentials are supported: tokens, client certificates,
usernames & passwords. No auth-provider commands are executed and no tokens
are refreshed. For anything more complex, construct :class:`ConnectionInfo`
directly and pass it to :class:`APIContext`.
"""
import logging
import os
from collections.abc import Iterable
from typing import Any

import yaml

from patchutils._cogs.structs import credentials

logger = logging.getLogger(__name__)

SERVICE_ACCOUNT_DIR = '/var/run/secrets/kubernetes.io/serviceaccount'
IN_CLUSTER_SERVER = 'https://kubernetes.default.svc'
DEFAULT_KUBECONFIG = '~/.kube/config'


def login(*, kubeconfig: str | None = None) -> credentials.ConnectionInfo:
    """
    Find the credentials in the usual places, the first one wins.

    An explicitly passed kubeconfig is used exclusively, without the fallbacks.
    Otherwise, the service account is tried first, then the kubeconfig files.
    """
    if kubeconfig is not None:
        info = login_with_kubeconfig(kubeconfig=kubeconfig)
    else:
        info = login_with_service_account() or login_with_kubeconfig()
    if info is None:
        raise credentials.LoginError("Cannot find any credentials: "
                                     "neither in-cluster, nor via kubeconfig.")
    return info


def _read_text(path: str) -> str | None:
    if not os.path.exists(path):
        return None
    with open(path, encoding='utf-8') as f:
        return f.read().strip()


def login_with_service_account() -> credentials.ConnectionInfo | None:
    """ Use the pod's own service account, if running in a cluster. """
    token = _read_text(os.path.join(SERVICE_ACCOUNT_DIR, 'token'))
    if token is None:
        return None

    ca_path = os.path.join(SERVICE_ACCOUNT_DIR, 'ca.crt')
    namespace = _read_text(os.path.join(SERVICE_ACCOUNT_DIR, 'namespace'))
    logger.debug("Logging in with the in-cluster service account.")
    return credentials.ConnectionInfo(
        server=IN_CLUSTER_SERVER,
        ca_path=ca_path if os.path.exists(ca_path) else None,
        token=token or None,
        default_namespace=namespace or None,
    )


def _kubeconfig_paths(kubeconfig: str | None) -> list[str]:
    # The explicit value, then $KUBECONFIG, then the default file if it exists.
    if not kubeconfig:
        kubeconfig = os.environ.get('KUBECONFIG')
    if not kubeconfig and os.path.exists(os.path.expanduser(DEFAULT_KUBECONFIG)):
        kubeconfig = DEFAULT_KUBECONFIG
    if not kubeconfig:
        return []
    return [os.path.expanduser(path.strip()) for path in kubeconfig.split(os.pathsep) if path.strip()]


class _MergedKubeconfig:
    """
    Several kubeconfig files as one, with the first-found value of every entry winning.

    See https://kubernetes.io/docs/concepts/configuration/organize-cluster-access-kubeconfig/
    """

    def __init__(self) -> None:
        super().__init__()
        self.current_context: str | None = None
        self.contexts: dict[str, Any] = {}
        self.clusters: dict[str, Any] = {}
        self.users: dict[str, Any] = {}

    def merge(self, config: dict[str, Any]) -> None:
        if self.current_context is None:
            self.current_context = config.get('current-context')
        self._merge_entries(self.contexts, config.get('contexts'), 'context')
        self._merge_entries(self.clusters, config.get('clusters'), 'cluster')
        self._merge_entries(self.users, config.get('users'), 'user')

    @staticmethod
    def _merge_entries(into: dict[str, Any], items: Iterable[Any] | None, field: str) -> None:
        for item in items or []:
            into.setdefault(item['name'], item.get(field) or {})


def login_with_kubeconfig(*, kubeconfig: str | None = None) -> credentials.ConnectionInfo | None:
    """
    Use the current context of the kubeconfig(s), if there are any.

    The files that are explicitly listed must exist and be parseable.
    """
    paths = _kubeconfig_paths(kubeconfig)
    if not paths:
        return None

    merged = _MergedKubeconfig()
    for path in paths:
        with open(path, encoding='utf-8') as f:
            merged.merge(yaml.safe_load(f) or {})

    if merged.current_context is None:
        raise credentials.LoginError('Current context is not set in kubeconfigs.')
    try:
        context = merged.contexts[merged.current_context]
        cluster = merged.clusters[context['cluster']]
        user = merged.users.get(context.get('user'), {})
    except KeyError as e:
        raise credentials.LoginError(f'Kubeconfigs refer to an undefined entry: {e}') from e

    # The last known token of an auth-provider: it is used as is, never refreshed.
    provider_token = user.get('auth-provider', {}).get('config', {}).get('access-token')

    logger.debug(f"Logging in with the kubeconfig context {merged.current_context!r}.")
    return credentials.ConnectionInfo(
        server=cluster.get('server'),
        ca_path=cluster.get('certificate-authority'),
        ca_data=cluster.get('certificate-authority-data'),
        insecure=cluster.get('insecure-skip-tls-verify'),
        certificate_path=user.get('client-certificate'),
        certificate_data=user.get('client-certificate-data'),
        private_key_path=user.get('client-key'),
        private_key_data=user.get('client-key-data'),
        username=user.get('username'),
        password=user.get('password'),
        token=user.get('token') or provider_token,
        default_namespace=context.get('namespace'),
    )
