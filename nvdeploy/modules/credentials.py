"""Scoped kubeconfig credentials.

A credential is referenced by name from a cluster's env file (for example
``prod-eu-kubeconfig``) and resolved to kubeconfig content from the
environment, where CI systems inject secrets, or from a credentials
directory. ``acquire`` materialises it as a private temporary file for the
duration of one cluster's deployment and removes it afterwards.
"""
import logging
import os
import re
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Mapping, Optional, Union

import yaml
from kubernetes import config
from kubernetes.config.config_exception import ConfigException

from .errors import CredentialError

logger = logging.getLogger("nvdeploy.credentials")


def env_var_name(credential: str) -> str:
    """Map a credential name to the environment variable holding it."""
    return re.sub(r'[^A-Za-z0-9]', '_', credential).upper()


class CredentialStore:
    """Looks up kubeconfig content by credential name."""

    def __init__(
        self,
        env: Optional[Mapping[str, str]] = None,
        directory: Optional[Union[str, Path]] = None,
    ):
        self.env = os.environ if env is None else env
        self.directory = Path(directory).expanduser() if directory else None

    def lookup(self, credential: str) -> str:
        """Return the kubeconfig content for ``credential``.

        Raises:
            CredentialError: If the credential is not found anywhere
        """
        var = env_var_name(credential)
        content = self.env.get(var)
        if content:
            logger.debug(f"Using credential '{credential}' from ${var}")
            return content

        if self.directory:
            path = self.directory / credential
            if path.is_file():
                logger.debug(f"Using credential '{credential}' from {path}")
                try:
                    return path.read_text(encoding='utf-8')
                except (OSError, UnicodeDecodeError) as e:
                    raise CredentialError(
                        f"Credential '{credential}' could not be read from {path}: {e}"
                    ) from e

        tried = f"${var}" + (f", {self.directory / credential}" if self.directory else "")
        raise CredentialError(f"Credential '{credential}' not found. Tried: {tried}")

    @contextmanager
    def acquire(self, credential: str, cluster: Optional[str] = None) -> Iterator[str]:
        """Yield the path of a temporary kubeconfig for ``credential``.

        The file is readable only by the current user and is deleted on exit,
        whether the block succeeds or raises.
        """
        try:
            content = self.lookup(credential)
        except CredentialError as e:
            e.cluster = cluster
            raise

        fd, path = tempfile.mkstemp(prefix="nvdeploy-", suffix=".kubeconfig")
        try:
            with os.fdopen(fd, 'w') as f:
                f.write(content)
            os.chmod(path, 0o600)

            try:
                _, active = config.list_kube_config_contexts(config_file=path)
            except (ConfigException, yaml.YAMLError, ValueError, TypeError) as e:
                raise CredentialError(
                    f"Credential '{credential}' is not a usable kubeconfig: {e}", cluster
                ) from e
            logger.info(f"🔑 Using kube context '{active['name']}' for {cluster or credential}")

            yield path
        finally:
            try:
                os.unlink(path)
            except FileNotFoundError:
                pass
            logger.debug(f"Released credential '{credential}'")
