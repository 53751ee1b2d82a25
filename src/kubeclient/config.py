"""Connection options, in-cluster bootstrap, and kubeconfig loading."""

from __future__ import annotations

import base64
import os
import tempfile
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import structlog
import yaml

from kubeclient.errors import ConfigurationError

log = structlog.get_logger()

DEFAULT_NAMESPACE = "default"

SERVICE_ACCOUNT_DIR = Path("/var/run/secrets/kubernetes.io/serviceaccount")

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class ClientCertificate:
    """A client certificate and its private key, both as file paths."""

    cert_file: str
    key_file: str | None = None


@dataclass
class ConnectionOptions:
    """Options used to configure a KubeApiClient.

    Instances are plain mutable records. Anything that holds on to options for
    longer than a single call takes a ``clone()`` first, so later changes made
    by the caller never leak into an already-built client.
    """

    endpoint: str | None = None
    default_namespace: str = field(default_factory=lambda: os.environ.get("KUBECLIENT_NAMESPACE", DEFAULT_NAMESPACE))
    access_token: str | None = None
    client_certificate: ClientCertificate | None = None
    # PEM text or the path of a PEM file.
    trusted_ca_certificate: str | None = None
    allow_insecure: bool = False
    log_headers: bool = field(default_factory=lambda: _env_flag("KUBECLIENT_LOG_HEADERS"))
    log_payloads: bool = field(default_factory=lambda: _env_flag("KUBECLIENT_LOG_PAYLOADS"))

    def validate(self) -> ConnectionOptions:
        """Check the options and return them unchanged.

        Raises:
            ConfigurationError: If the endpoint is missing or relative, the default
                namespace is blank, or a client certificate has no usable private key.
        """
        if not self.endpoint or not _is_absolute_uri(self.endpoint):
            msg = f"Invalid connection options: must specify an absolute API endpoint (got {self.endpoint!r})."
            raise ConfigurationError(msg)

        if not self.default_namespace or not self.default_namespace.strip():
            msg = "Invalid connection options: must specify a non-blank default namespace."
            raise ConfigurationError(msg)

        if self.client_certificate is not None:
            key_file = self.client_certificate.key_file
            if not key_file or not key_file.strip():
                msg = (
                    "Invalid connection options: the private key for the supplied client certificate is not available."
                )
                raise ConfigurationError(msg)
            if not os.access(key_file, os.R_OK):
                msg = f"Invalid connection options: client certificate private key {key_file!r} is not readable."
                raise ConfigurationError(msg)

        return self

    def clone(self) -> ConnectionOptions:
        """Return an independent copy of these options."""
        return replace(self)

    @classmethod
    def from_pod_service_account(cls, service_account_dir: Path | None = None) -> ConnectionOptions:
        """Build options from the service account mounted into a Kubernetes pod.

        Only works from within a container running in a pod.

        Raises:
            ConfigurationError: If KUBERNETES_SERVICE_HOST is not set or the
                service account token cannot be read.
        """
        host = os.environ.get("KUBERNETES_SERVICE_HOST", "").strip()
        if not host:
            msg = (
                "In-cluster configuration is only available when running in a Kubernetes pod "
                "(KUBERNETES_SERVICE_HOST environment variable is not defined)."
            )
            raise ConfigurationError(msg)
        port = os.environ.get("KUBERNETES_SERVICE_PORT", "443").strip() or "443"
        if ":" in host:
            host = f"[{host}]"

        account_dir = service_account_dir or SERVICE_ACCOUNT_DIR
        token_path = account_dir / "token"
        if not token_path.exists():
            msg = f"Service account token not found: {token_path}."
            raise ConfigurationError(msg)

        ca_path = account_dir / "ca.crt"
        namespace_path = account_dir / "namespace"
        namespace = namespace_path.read_text().strip() if namespace_path.exists() else ""

        options = cls(
            endpoint=f"https://{host}:{port}",
            access_token=token_path.read_text().strip(),
            trusted_ca_certificate=str(ca_path) if ca_path.exists() else None,
        )
        if namespace:
            options.default_namespace = namespace
        log.debug("loaded_pod_service_account", endpoint=options.endpoint, namespace=options.default_namespace)
        return options

    @classmethod
    def from_kube_config(cls, path: Path | str | None = None, context: str | None = None) -> ConnectionOptions:
        """Build options from a kubeconfig file.

        Args:
            path: Kubeconfig location. Defaults to the first entry of ``KUBECONFIG``,
                then ``~/.kube/config``.
            context: Context name. Defaults to the file's ``current-context``.

        Raises:
            ConfigurationError: If the file is missing, malformed, or does not
                define the requested context, cluster, or user.
        """
        config_path = Path(path) if path is not None else _default_kube_config_path()
        raw = _load_kube_config(config_path)

        context_name = context or raw.get("current-context")
        if not context_name:
            msg = f"Kubeconfig {config_path} has no current-context and no context was requested."
            raise ConfigurationError(msg)

        context_entry = _find_named(raw, "contexts", "context", context_name, config_path)
        cluster_entry = _find_named(raw, "clusters", "cluster", context_entry.get("cluster"), config_path)
        user_name = context_entry.get("user")
        user_entry = _find_named(raw, "users", "user", user_name, config_path) if user_name else {}

        server = cluster_entry.get("server")
        if not server:
            msg = f"Cluster for context '{context_name}' in {config_path} has no server."
            raise ConfigurationError(msg)

        options = cls(endpoint=str(server))
        if context_entry.get("namespace"):
            options.default_namespace = str(context_entry["namespace"])
        options.allow_insecure = bool(cluster_entry.get("insecure-skip-tls-verify", False))

        if cluster_entry.get("certificate-authority-data"):
            options.trusted_ca_certificate = base64.b64decode(cluster_entry["certificate-authority-data"]).decode()
        elif cluster_entry.get("certificate-authority"):
            options.trusted_ca_certificate = _resolve_relative(config_path, cluster_entry["certificate-authority"])

        if user_entry.get("token"):
            options.access_token = str(user_entry["token"])
        elif user_entry.get("tokenFile"):
            options.access_token = Path(_resolve_relative(config_path, user_entry["tokenFile"])).read_text().strip()

        cert_file = _file_or_data(config_path, user_entry, "client-certificate", ".crt")
        if cert_file:
            key_file = _file_or_data(config_path, user_entry, "client-key", ".key")
            options.client_certificate = ClientCertificate(cert_file=cert_file, key_file=key_file)

        log.debug("loaded_kube_config", path=str(config_path), context=context_name, endpoint=options.endpoint)
        return options


def _is_absolute_uri(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme) and bool(parsed.netloc)


def _default_kube_config_path() -> Path:
    env_value = os.environ.get("KUBECONFIG", "")
    first = env_value.split(os.pathsep)[0].strip() if env_value else ""
    return Path(first) if first else Path.home() / ".kube" / "config"


def _load_kube_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        msg = f"Kubeconfig file not found: {path}. Set KUBECONFIG or pass an explicit path."
        raise ConfigurationError(msg)

    try:
        raw = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        msg = f"Kubeconfig file {path} is not valid YAML: {exc}"
        raise ConfigurationError(msg) from exc

    if not isinstance(raw, dict):
        msg = f"Kubeconfig file {path} must contain a mapping at the top level."
        raise ConfigurationError(msg)
    return raw


def _find_named(raw: dict[str, Any], section: str, key: str, name: str | None, path: Path) -> dict[str, Any]:
    """Return the inner mapping of the ``section`` entry called ``name``."""
    for entry in raw.get(section) or []:
        if isinstance(entry, dict) and entry.get("name") == name:
            inner = entry.get(key)
            if not isinstance(inner, dict):
                msg = f"Kubeconfig {path}: {key} '{name}' must be a mapping."
                raise ConfigurationError(msg)
            return inner
    msg = f"Kubeconfig {path} does not define a {key} named '{name}'."
    raise ConfigurationError(msg)


def _resolve_relative(config_path: Path, value: str) -> str:
    candidate = Path(os.path.expanduser(str(value)))
    if not candidate.is_absolute():
        candidate = config_path.parent / candidate
    return str(candidate)


def _file_or_data(config_path: Path, user_entry: dict[str, Any], key: str, suffix: str) -> str | None:
    """Resolve ``key`` or ``key-data`` to a file path.

    Inline data is decoded to a private temporary file since the TLS layer only
    loads certificate chains from disk.
    """
    if user_entry.get(f"{key}-data"):
        content = base64.b64decode(user_entry[f"{key}-data"])
        fd, name = tempfile.mkstemp(prefix="kubeclient-", suffix=suffix)
        with os.fdopen(fd, "wb") as handle:
            handle.write(content)
        return name
    if user_entry.get(key):
        return _resolve_relative(config_path, user_entry[key])
    return None
