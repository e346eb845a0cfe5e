# npulabels

`npulabels` turns information about the NPU devices in a host into
node feature labels, and keeps a feature file up to date so that a
node-feature-discovery agent can attach those labels to the node.

## What it produces

Each recognised device contributes labels such as:

```
furiosa.ai/npu.family=rngd
furiosa.ai/npu.product=rngd_s
furiosa.ai/driver.version=1.2.3
furiosa.ai/driver.version.major=1
furiosa.ai/driver.version.minor=2
furiosa.ai/driver.version.patch=3
furiosa.ai/driver.version.metadata=1a2b3c
```

Firmware (`furiosa.ai/firmware.version*`) and PERT
(`furiosa.ai/pert.version*`) labels are added in the same shape when the
device carries those versions. When the devices on a host disagree about
their firmware or PERT version, those labels are left out rather than
reporting one device's value for all. A `furiosa.ai/npu.count` label
carries the number of devices found.

Recognised architectures are `warboy` (family `warboy`) and `rngd`,
`rngd_s` and `rngd_max` (family `rngd`); the product label is the
architecture name. Building a device from any other architecture raises
`UnknownArchError` (a `ValueError`).

## Modules

`npulabels.npu`

- `VersionInfo(major, minor, patch, metadata="")` – a frozen dataclass;
  its string form is `major.minor.patch`.
- `NpuDevice` – one device, with `family`, `product`, `driver_info`,
  `firmware_info` and `pert_info`. Build it with
  `NpuDevice.from_arch(arch, driver_info, firmware_info=None, pert_info=None)`
  and get its labels, sorted by key, with `to_labels()`.
- `recognize_family(arch)` and `recognize_product(arch)` – map an
  architecture name to its family and product.
- `UnknownArchError` – raised for an architecture with no known family.

`npulabels.discovery`

- `check_labels(devices)` – drops firmware or PERT versions that are not
  the same on every device.
- `extract_labels(devices)` – merges the labels of all devices and adds
  the device count; returns an empty dict when there are no devices.
- `labels_to_feature(labels)` – renders labels as `key=value` lines,
  sorted by key.
- `sync_file_atomically(labels, output_path)` – writes the feature file
  (mode `0644`) through a temporary file in the same directory, creating
  the directory if needed, then renames it into place, so readers never
  see a half-written file. Nothing is written when there are no labels;
  a path without a file name raises `ValueError`.
- `remove_ffd(output_path)` – removes the feature file if it exists as a
  regular file.
- `sync_label(output_path, detect)` – asks `detect` for the current
  devices and refreshes the feature file, re-raising any failure.
- `run_loop(output_path, interval=60, detect=...)` – refreshes the feature
  file at once and then every `interval` seconds until the process
  receives SIGTERM, SIGINT or SIGQUIT, or a refresh fails; then removes
  the file. `detect` is required and `interval` must be positive,
  otherwise `ValueError` is raised. It installs signal handlers on the
  running asyncio loop, so it needs a Unix event loop.
- `DEFAULT_INTERVAL` (60) and `DEFAULT_OUTPUT`
  (`/etc/kubernetes/node-feature-discovery/features.d/ffd`) are the
  usual settings.

`detect` is any callable taking no arguments that returns an iterable of
`NpuDevice`, or an awaitable of one.

## Example

```python
import asyncio

from npulabels.discovery import DEFAULT_OUTPUT, labels_to_feature, run_loop
from npulabels.npu import NpuDevice, VersionInfo

print(labels_to_feature({
    "furiosa.ai/npu.product": "warboy",
    "furiosa.ai/npu.family": "warboy",
}))
# furiosa.ai/npu.family=warboy
# furiosa.ai/npu.product=warboy


def detect():
    version = VersionInfo(1, 2, 3, "1a2b3c")
    return [NpuDevice.from_arch("rngd", version, version, version)]


asyncio.run(run_loop(DEFAULT_OUTPUT, interval=60, detect=detect))
```

## What it does not do

The package does not find devices on the host by itself: it has no
means of querying the NPU driver, so the caller supplies `detect`. It
also ships no command-line program; a service starts `run_loop` from its
own code.