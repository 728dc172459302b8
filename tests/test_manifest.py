import json

import pytest

from conftest import make_manifest
from packotter.exceptions import ManifestMalformed, ManifestNotFound
from packotter.models import FileReference, Manifest, load_manifest


def test_from_dict_parses_fields():
    manifest = Manifest.from_dict(make_manifest())

    assert manifest.name == "TestPack"
    assert manifest.version == "1.0.0"
    assert manifest.game_version == "1.20.1"
    assert manifest.loader_id == "forge-47.2.0"
    assert manifest.overrides == "overrides"
    assert manifest.files == [
        FileReference(100, 1000, True),
        FileReference(200, 2000, True),
    ]


def test_primary_loader_is_selected():
    data = make_manifest()
    data["minecraft"]["modLoaders"] = [
        {"id": "fabric-0.15.0", "primary": False},
        {"id": "forge-47.2.0", "primary": True},
    ]

    assert Manifest.from_dict(data).loader_id == "forge-47.2.0"


def test_file_order_is_preserved():
    files = [{"projectID": i, "fileID": i * 10} for i in (5, 3, 9, 1)]
    manifest = Manifest.from_dict(make_manifest(files=files))

    assert [ref.project_id for ref in manifest.files] == [5, 3, 9, 1]
    assert all(ref.required for ref in manifest.files)


def test_optional_fields_default():
    data = make_manifest()
    del data["version"]
    del data["overrides"]

    manifest = Manifest.from_dict(data)

    assert manifest.version == ""
    assert manifest.overrides is None


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.pop("name"),
        lambda d: d.pop("files"),
        lambda d: d.pop("minecraft"),
        lambda d: d["minecraft"].pop("version"),
        lambda d: d["minecraft"].update(modLoaders=[]),
        lambda d: d["minecraft"].update(modLoaders=[{"id": "forge-1", "primary": False}]),
        lambda d: d.update(files={"projectID": 1}),
        lambda d: d.update(files=[{"projectID": "1", "fileID": 2}]),
        lambda d: d.update(files=[{"projectID": True, "fileID": 2}]),
        lambda d: d.update(files=[{"fileID": 2}]),
    ],
)
def test_missing_or_invalid_fields_raise(mutate):
    data = make_manifest()
    mutate(data)

    with pytest.raises(ManifestMalformed):
        Manifest.from_dict(data)


def test_load_manifest_not_found(tmp_path):
    with pytest.raises(ManifestNotFound):
        load_manifest(tmp_path / "manifest.json")


def test_load_manifest_invalid_json(tmp_path):
    path = tmp_path / "manifest.json"
    path.write_text("{not json")

    with pytest.raises(ManifestMalformed):
        load_manifest(path)


def test_load_manifest_reads_file(tmp_path):
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps(make_manifest(name="Other")))

    assert load_manifest(path).name == "Other"


def test_error_codes():
    err = ManifestNotFound("missing")

    assert err.code == "E701"
    assert str(err) == "[E701] missing"
    assert err.to_dict()["type"] == "ManifestNotFound"
