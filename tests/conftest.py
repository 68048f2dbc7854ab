import pytest

from cdispec.spec.spec_types import CDISpec, ContainerEdits, Device


@pytest.fixture
def sample_raw() -> CDISpec:
    """A small two-device spec of kind acme.com/gpu."""
    return CDISpec(
        kind="acme.com/gpu",
        devices=[
            Device(
                name="gpu0",
                container_edits=ContainerEdits(
                    device_nodes=[{"path": "/dev/acme0", "type": "c", "major": 195, "minor": 0}],
                ),
            ),
            Device(name="all", annotations={"acme.com/count": "1"}),
        ],
        container_edits=ContainerEdits(
            env=["ACME_VISIBLE_DEVICES=all"],
            mounts=[{"hostPath": "/usr/lib/libacme.so", "containerPath": "/usr/lib/libacme.so", "options": ["ro"]}],
        ),
    )


@pytest.fixture
def scratch_dir(tmp_path):
    d = tmp_path / "scratch"
    d.mkdir()
    return d
