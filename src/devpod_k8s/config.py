"""Driver configuration using pydantic-settings.

Configuration hierarchy:
- KubernetesConfig: Cluster access and workspace resource settings
- RuntimeConfig: Resource naming and ownership markers
- LoggingConfig: Logging behavior
- DriverConfig: Main config aggregating all sub-configs

Environment variable prefix: DEVPOD_
Example: DEVPOD_KUBERNETES_NAMESPACE=devpod
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class KubernetesConfig(BaseSettings):
    """Kubernetes cluster configuration.

    Everything here is read-only input for the driver; the driver never
    writes configuration back.
    """

    model_config = SettingsConfigDict(env_prefix="DEVPOD_KUBERNETES_")

    # Connection
    kubectl_path: str = Field(default="kubectl", description="kubectl binary")
    kubeconfig: str = Field(default="", description="Path to kubeconfig (empty = kubectl default)")
    context: str = Field(default="", description="kubeconfig context (empty = current)")
    namespace: str = Field(default="", description="Namespace for workspace resources")
    create_namespace: bool = Field(
        default=False,
        description="Create the namespace before provisioning (best effort)",
    )

    # Pod placement and identity
    service_account: str = Field(default="", description="Service account attached to the pod")
    node_selector: str = Field(
        default="",
        description="Node selector as key=value[,key=value...]",
    )
    resources: str = Field(
        default="",
        description="Resources as requests.cpu=500m,limits.memory=1Gi",
    )

    # Persistent volume claim
    disk_size: str = Field(default="10Gi", description="Requested PVC size")
    storage_class: str = Field(default="", description="PVC storage class (empty = cluster default)")

    # Timeouts
    pod_timeout: float = Field(default=600.0, description="Pod readiness timeout (seconds)")
    poll_interval: float = Field(default=1.0, description="Pod status poll interval (seconds)")


class RuntimeConfig(BaseSettings):
    """Runtime resource configuration.

    These settings define naming conventions and the ownership marker
    applied to every resource the driver creates.
    """

    model_config = SettingsConfigDict(env_prefix="DEVPOD_RUNTIME_", frozen=True)

    resource_prefix: str = Field(
        default="devpod-",
        description="Prefix for Kubernetes resources (pods, PVCs)",
    )
    container_name: str = Field(
        default="devpod",
        description="Name of the dev container inside the pod and of the pod volume",
    )
    info_annotation: str = Field(
        default="devpod.sh/info",
        description="PVC annotation key holding the container info snapshot",
    )
    owner_labels: dict[str, str] = Field(
        default={"devpod.sh/created": "true"},
        description="Labels marking driver-owned resources",
    )


class LoggingConfig(BaseSettings):
    """Logging configuration.

    Supports both text and JSON formats for different environments:
    - text: Human-readable for interactive use
    - json: Structured logging when the driver runs under a manager
    """

    model_config = SettingsConfigDict(env_prefix="DEVPOD_LOGGING_")

    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="text", description="Log format (text, json)")
    service_name: str = Field(default="devpod-k8s", description="Service identifier in logs")


class DriverConfig(BaseSettings):
    """Main driver configuration aggregating all sub-configs.

    Environment variable prefix: DEVPOD_
    Sub-configs use their own prefixes (DEVPOD_KUBERNETES_, DEVPOD_RUNTIME_, etc.)
    """

    model_config = SettingsConfigDict(
        env_prefix="DEVPOD_",
        env_nested_delimiter="__",
    )

    kubernetes: KubernetesConfig = Field(default_factory=KubernetesConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache
def get_driver_config() -> DriverConfig:
    """Get cached driver configuration singleton."""
    return DriverConfig()
