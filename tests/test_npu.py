import pytest

from npulabels.npu import (
    NpuDevice,
    UnknownArchError,
    VersionInfo,
    recognize_family,
    recognize_product,
)


@pytest.fixture
def version_info():
    return VersionInfo(1, 2, 3, "a1b2c3")


def test_npu_device_new(version_info):
    device = NpuDevice.from_arch("warboy", version_info, version_info, version_info)
    expected = NpuDevice(
        family="warboy",
        product="warboy",
        driver_info=version_info,
        firmware_info=version_info,
        pert_info=version_info,
    )
    assert device == expected


def test_npu_device_unknown_arch(version_info):
    with pytest.raises(UnknownArchError, match="Unknown Arch: foo"):
        NpuDevice.from_arch("foo", version_info)


def test_recognize_family():
    assert recognize_family("warboy") == "warboy"
    assert recognize_family("rngd") == "rngd"


@pytest.mark.parametrize("arch", ["rngd_s", "rngd_max"])
def test_recognize_family_rngd_variants(arch):
    assert recognize_family(arch) == "rngd"


def test_recognize_family_unknown():
    with pytest.raises(UnknownArchError) as info:
        recognize_family("mystery")
    assert info.value.arch == "mystery"
    assert isinstance(info.value, ValueError)


def test_recognize_product():
    assert recognize_product("warboy") == "warboy"
    assert recognize_product("rngd") == "rngd"
    assert recognize_product("rngd_max") == "rngd_max"


def test_version_info_str():
    assert str(VersionInfo(4, 5, 6, "meta")) == "4.5.6"


def test_to_labels_driver_only():
    device = NpuDevice.from_arch("rngd_s", VersionInfo(2, 0, 1, "abc"))
    assert device.to_labels() == {
        "furiosa.ai/npu.family": "rngd",
        "furiosa.ai/npu.product": "rngd_s",
        "furiosa.ai/driver.version": "2.0.1",
        "furiosa.ai/driver.version.major": "2",
        "furiosa.ai/driver.version.minor": "0",
        "furiosa.ai/driver.version.patch": "1",
        "furiosa.ai/driver.version.metadata": "abc",
    }


def test_to_labels_sorted_and_complete(version_info):
    device = NpuDevice.from_arch("warboy", version_info, version_info, version_info)
    labels = device.to_labels()
    assert list(labels) == sorted(labels)
    assert len(labels) == 17
    assert labels["furiosa.ai/pert.version"] == "1.2.3"
    assert labels["furiosa.ai/firmware.version.metadata"] == "a1b2c3"