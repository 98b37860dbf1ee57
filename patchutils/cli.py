import asyncio
import functools
import json
from collections.abc import Callable, Collection, Mapping
from typing import Any, TextIO

import click
import yaml

from patchutils._cogs.clients import auth, errors, login, patching
from patchutils._cogs.configs import configuration
from patchutils._cogs.structs import bodies, credentials, pointers, references
from patchutils._core.actions import loggers
from patchutils._core.patching import finalizers, maps, outcomes, specs

# Shortcuts for the most common maps, in addition to the arbitrary JSON Pointers.
MAP_ALIASES: Mapping[str, str] = {
    'labels': pointers.join('metadata', 'labels'),
    'annotations': pointers.join('metadata', 'annotations'),
}


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


class MapPathParamType(click.ParamType):
    """ A JSON Pointer to a map in the body, or one of the aliases. """
    name = 'path'

    def convert(self, value: Any, param: Any, ctx: Any) -> str:
        path: str = MAP_ALIASES.get(value, value)
        try:
            pointers.split(path)
        except ValueError as e:
            self.fail(f"{e} (or use one of: {', '.join(MAP_ALIASES)})", param, ctx)
        return path


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @click.option('--log-refkey', type=str)
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                log_prefix: bool | None = False,
                log_refkey: str | None = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


def target_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to identify the target object and the way to patch it. """
    @click.option('-b', '--body', type=click.File('r'), default=None,
                  help="The object's current state (YAML or JSON); '-' for stdin.")
    @click.option('--api-version', default='v1', show_default=True)
    @click.option('--plural', type=str, default=None)
    @click.option('--cluster-scoped', is_flag=True)
    @click.option('-n', '--namespace', type=str, default=None)
    @click.option('--name', type=str, default=None)
    @click.option('--apply', 'apply', is_flag=True, help="Send the patch to the API server.")
    @click.option('--kubeconfig', type=str, default=None, envvar='KUBECONFIG')
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(body: TextIO | None, api_version: str, plural: str | None, cluster_scoped: bool,
                namespace: str | None, name: str | None, apply: bool, kubeconfig: str | None,
                *args: Any, **kwargs: Any) -> Any:
        if apply and not plural:
            raise click.UsageError("The resource's --plural name is required to --apply.")
        group, _, version = api_version.rpartition('/')
        resource = references.Resource(group=group, version=version, plural=plural or '',
                                       namespaced=not cluster_scoped)
        raw_body: bodies.RawBody = load_yaml(body) if body is not None else {}
        meta = bodies.get_meta(raw_body)
        namespace = namespace or meta.get('namespace')
        target = references.Target(
            resource=resource,
            name=name or meta.get('name') or '',
            namespace=references.NamespaceName(namespace) if namespace and not cluster_scoped else None,
        )
        controls = Controls(target=target, body=raw_body, apply=apply, kubeconfig=kubeconfig)
        return fn(controls, *args, **kwargs)

    return wrapper


class Controls:
    """ Everything needed by the commands to deliver (or just print) the patch. """

    def __init__(self, *, target: references.Target, body: bodies.RawBody,
                 apply: bool, kubeconfig: str | None) -> None:
        super().__init__()
        self.target = target
        self.body = body
        self.apply = apply
        self.kubeconfig = kubeconfig
        self.settings = configuration.ClientSettings()

    async def __call__(self, target: references.Target, patch: bytes) -> object:
        # Acts as an applier: a session is opened only when there is a patch to send.
        info = login.login(kubeconfig=self.kubeconfig)
        async with auth.APIContext(info) as context:
            applier = patching.RemoteApplier(context, settings=self.settings)
            return await applier(target, patch)

    def conclude(self, outcome: outcomes.Outcome) -> None:
        """ Print the patch or the reasons why there is no patch; apply it if requested. """
        match outcome:
            case outcomes.Outcome(error=outcomes.NoPatchRequired() as e):
                click.echo(f"No patch is required: {e}", err=True)
            case outcomes.Outcome(error=outcomes.PatchError() as e):
                raise click.ClickException(str(e))
            case outcomes.Outcome(patches=document, apply_fn=apply_fn) if apply_fn is not None:
                click.echo(json.dumps(document.as_json_patch(), indent=2))
                if self.apply:
                    try:
                        asyncio.run(apply_fn())
                    except (errors.APIError, credentials.LoginError) as e:
                        raise click.ClickException(f"Patching failed: {e!r}") from e


def load_yaml(stream: TextIO) -> Any:
    try:
        return yaml.safe_load(stream) or {}
    except yaml.YAMLError as e:
        raise click.BadParameter(f"Cannot parse {stream.name}: {e}") from e


def dig(body: Mapping[str, Any], path: str) -> Any:
    """ Get a value by a pointer in the body, or ``None`` if any of the parents is absent. """
    value: Any = body
    for token in pointers.split(path):
        if not isinstance(value, Mapping):
            return None
        value = value.get(token)
    return value


def escape_map(value: Any, source: str, *, strings: bool = True) -> dict[str, Any]:
    """ Escape the keys of a raw map for the pointers; the new values must be strings. """
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise click.BadParameter(f"Expected a map in {source}, got {type(value).__name__}.")
    result: dict[str, Any] = {}
    for key, val in value.items():
        if strings and not isinstance(val, str):
            raise click.BadParameter(f"Expected a string value of {key!r} in {source}, got {val!r}.")
        result[pointers.escape(str(key))] = val
    return result


def parse_pairs(pairs: Collection[str]) -> dict[str, str]:
    result: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition('=')
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got {pair!r}.")
        result[key] = value
    return result


@click.version_option(prog_name='patchutils')
@click.group(name='patchutils', context_settings=dict(
    auto_envvar_prefix='PATCHUTILS',
))
def main() -> None:
    pass


@main.command('map')
@logging_options
@target_options
@click.option('-s', '--set', 'pairs', multiple=True, help="A raw KEY=VALUE; can be repeated.")
@click.option('-f', '--filename', type=click.File('r'), default=None,
              help="A YAML/JSON file with the desired raw keys & values.")
@click.argument('path', type=MapPathParamType())
def map_(
        __controls: Controls,
        path: str,
        pairs: Collection[str],
        filename: TextIO | None,
) -> None:
    """ Add or replace the map members (e.g. labels, annotations) at the PATH. """
    desired = escape_map(load_yaml(filename), filename.name) if filename is not None else {}
    desired.update(escape_map(parse_pairs(pairs), "--set"))
    original = escape_map(dig(__controls.body, path), path, strings=False)
    outcome = maps.patch_map(__controls.target, __controls, path, original, desired)
    __controls.conclude(outcome)


@main.command('finalizer-in')
@logging_options
@target_options
@click.argument('finalizer')
def finalizer_in(__controls: Controls, finalizer: str) -> None:
    """ Add the FINALIZER to the object. """
    existing = bodies.get_finalizers(__controls.body)
    outcome = finalizers.patch_finalizer_in(__controls.target, __controls, existing, finalizer,
                                            settings=__controls.settings)
    __controls.conclude(outcome)


@main.command('finalizer-out')
@logging_options
@target_options
@click.argument('finalizer')
def finalizer_out(__controls: Controls, finalizer: str) -> None:
    """ Remove the FINALIZER from the object. """
    existing = bodies.get_finalizers(__controls.body)
    outcome = finalizers.patch_finalizer_out(__controls.target, __controls, existing, finalizer,
                                             settings=__controls.settings)
    __controls.conclude(outcome)


@main.command('spec')
@logging_options
@target_options
@click.option('-f', '--filename', type=click.File('r'), required=True,
              help="A YAML/JSON file with the new spec.")
def spec(__controls: Controls, filename: TextIO) -> None:
    """ Replace the object's spec as a whole. """
    new_spec = load_yaml(filename)
    outcome = specs.patch_spec(__controls.target, __controls, new_spec,
                               settings=__controls.settings)
    __controls.conclude(outcome)
