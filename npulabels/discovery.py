"""Compute node labels from detected NPU devices and keep a feature file in sync."""

from __future__ import annotations

import asyncio
import inspect
import logging
import os
import signal
import tempfile
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import replace
from pathlib import Path
from typing import Union

from .npu import NpuDevice

log = logging.getLogger(__name__)

Detector = Callable[[], Union[Iterable[NpuDevice], Awaitable[Iterable[NpuDevice]]]]

DEFAULT_INTERVAL = 60
DEFAULT_OUTPUT = "/etc/kubernetes/node-feature-discovery/features.d/ffd"


def labels_to_feature(labels: Mapping[str, str]) -> str:
    """Render labels as ``key=value`` lines ordered by key."""
    return "\n".join(f"{key}={value}" for key, value in sorted(labels.items()))


def check_labels(devices: list[NpuDevice]) -> list[NpuDevice]:
    """Drop firmware or pert versions that differ between devices."""
    result = list(devices)
    if not devices:
        return result
    first = devices[0]
    if any(d.firmware_info != first.firmware_info for d in devices):
        log.info("Some devices have different values for firmware version")
        result = [replace(d, firmware_info=None) for d in result]
    if any(d.pert_info != first.pert_info for d in devices):
        log.info("Some devices have different values for pert version")
        result = [replace(d, pert_info=None) for d in result]
    return result


def extract_labels(devices: Iterable[NpuDevice]) -> dict[str, str]:
    """Merge the labels of all devices and add the device count."""
    log.info("Start to extract node labels")
    devices = list(devices)
    if not devices:
        log.info("No devices found")
        return {}
    labels: dict[str, str] = {}
    for device in check_labels(devices):
        labels.update(device.to_labels())
    labels["furiosa.ai/npu.count"] = str(len(devices))
    log.info("Successfully extract node labels")
    return dict(sorted(labels.items()))


def sync_file_atomically(labels: Mapping[str, str], output_path: str | os.PathLike[str]) -> None:
    """Write labels to ``output_path`` through a temporary file and a rename."""
    if not labels:
        log.info("No labels found")
        return
    path = Path(output_path)
    log.info("Writing labels to output file: %s", path)
    content = labels_to_feature(labels)
    log.info("Labels updated:\n%s", content)

    if not path.name:
        raise ValueError(f"failed to get filename of output file {path}")
    parent = path.parent
    parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w", dir=parent, prefix=f".{path.name}-", delete=False, encoding="utf-8"
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(content)
        except BaseException:
            tmp.close()
            tmp_path.unlink(missing_ok=True)
            raise
    try:
        tmp_path.chmod(0o644)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    log.info("Successfully write node labels")


def remove_ffd(output_path: str | os.PathLike[str]) -> None:
    """Remove the feature file if it exists as a regular file."""
    path = Path(output_path)
    if path.is_file():
        path.unlink()


async def _detect(detect: Detector) -> list[NpuDevice]:
    found = detect()
    if inspect.isawaitable(found):
        found = await found
    return list(found)


async def sync_label(output_path: str | os.PathLike[str], detect: Detector) -> None:
    """Detect devices once and write their labels to the feature file."""
    try:
        devices = await _detect(detect)
    except Exception as exc:
        log.error("Failed to get device information: %s", exc)
        raise
    try:
        labels = extract_labels(devices)
    except Exception as exc:
        log.error("Failed to extract node labels: %s", exc)
        raise
    try:
        sync_file_atomically(labels, output_path)
    except Exception as exc:
        log.error("Failed to write node labels: %s", exc)
        raise


async def run_loop(
    output_path: str | os.PathLike[str],
    interval: float = DEFAULT_INTERVAL,
    detect: Detector | None = None,
) -> None:
    """Refresh labels every ``interval`` seconds until a stop signal or a failure.

    The feature file is removed when the loop ends.
    """
    if detect is None:
        raise ValueError("a device detector is required")
    if interval <= 0:
        raise ValueError("interval must be positive")
    log.info("Start to write labels")

    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    signals = (signal.SIGTERM, signal.SIGINT, signal.SIGQUIT)

    def _on_signal(sig: signal.Signals) -> None:
        log.debug("%s Shutting down", sig.name)
        stop.set()

    for sig in signals:
        loop.add_signal_handler(sig, _on_signal, sig)
    try:
        while not stop.is_set():
            try:
                await sync_label(output_path, detect)
            except Exception:
                log.error("Failed to write node labels")
                break
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
    finally:
        for sig in signals:
            loop.remove_signal_handler(sig)

    remove_ffd(output_path)
    log.info("Finish writing labels")