"""NPU device model and the node labels derived from it."""

from __future__ import annotations

from dataclasses import dataclass

_LABEL_PREFIX = "furiosa.ai"

_FAMILIES = {
    "warboy": "warboy",
    "rngd": "rngd",
    "rngd_s": "rngd",
    "rngd_max": "rngd",
}

_PRODUCTS = {
    "warboy": "warboy",
    "rngd": "rngd",
    "rngd_s": "rngd_s",
    "rngd_max": "rngd_max",
}


class UnknownArchError(ValueError):
    """Raised when a device architecture is not recognised."""

    def __init__(self, arch: str) -> None:
        super().__init__(f"Unknown Arch: {arch}")
        self.arch = arch


def recognize_family(arch: str) -> str:
    """Return the product family of an architecture name."""
    try:
        return _FAMILIES[arch]
    except KeyError:
        raise UnknownArchError(arch) from None


def recognize_product(arch: str) -> str:
    """Return the product name of an architecture name.

    Known architectures map to their product name; any other name is
    taken to be the product name itself.
    """
    product = _PRODUCTS.get(arch)
    if product is None:
        product = str(arch)
    return product


@dataclass(frozen=True)
class VersionInfo:
    """A semantic version with free-form build metadata."""

    major: int
    minor: int
    patch: int
    metadata: str = ""

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def labels(self, component: str) -> dict[str, str]:
        """Labels describing this version for the given component."""
        base = f"{_LABEL_PREFIX}/{component}.version"
        return {
            base: str(self),
            f"{base}.major": str(self.major),
            f"{base}.minor": str(self.minor),
            f"{base}.patch": str(self.patch),
            f"{base}.metadata": self.metadata,
        }


@dataclass(frozen=True)
class NpuDevice:
    """A detected NPU device and the versions of its software stack."""

    family: str
    product: str
    driver_info: VersionInfo
    firmware_info: VersionInfo | None = None
    pert_info: VersionInfo | None = None

    @classmethod
    def from_arch(
        cls,
        arch: str,
        driver_info: VersionInfo,
        firmware_info: VersionInfo | None = None,
        pert_info: VersionInfo | None = None,
    ) -> NpuDevice:
        """Build a device from its architecture name; raises UnknownArchError."""
        return cls(
            family=recognize_family(arch),
            product=recognize_product(arch),
            driver_info=driver_info,
            firmware_info=firmware_info,
            pert_info=pert_info,
        )

    def to_labels(self) -> dict[str, str]:
        """Node labels for this device, ordered by key."""
        labels = {
            f"{_LABEL_PREFIX}/npu.family": self.family,
            f"{_LABEL_PREFIX}/npu.product": self.product,
        }
        labels.update(self.driver_info.labels("driver"))
        if self.firmware_info is not None:
            labels.update(self.firmware_info.labels("firmware"))
        if self.pert_info is not None:
            labels.update(self.pert_info.labels("pert"))
        return dict(sorted(labels.items()))