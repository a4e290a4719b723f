"""
Unit tests for the batch upload (versioning, skip-if-present, manifest).

Uses the in-memory FakeStorage from fake_storage.py instead of GCS.
"""

import hashlib
from pathlib import Path

import pytest

from static_upload.uploader import (
    BatchResult,
    FileOutcome,
    UploadConfig,
    UploadResult,
    upload_file,
    version_and_upload_files,
)
from static_upload.utils.errors import (
    ConfigurationError,
    ExistenceCheckError,
    InputError,
    TransferError,
)
from static_upload.utils.metrics import UploadMetrics

from fake_storage import FakeStorage

DEFAULT_BUCKET = "assets.example.com"
FILES = ["app.js", "style.css", "logo.png"]


def md5_of(path: str) -> str:
    return hashlib.md5(Path(path).read_bytes()).hexdigest()


def make_config(**overrides) -> UploadConfig:
    values = dict(
        bucket_name=DEFAULT_BUCKET,
        directory="v1",
        default_bucket=DEFAULT_BUCKET,
    )
    values.update(overrides)
    return UploadConfig(**values)


class TestUploadConfig:
    """Test UploadConfig dataclass and validation."""

    def test_defaults(self):
        config = UploadConfig(bucket_name="my-bucket")

        assert config.directory == ""
        assert config.dry_run is False
        assert config.concurrency == 1

    def test_default_bucket_requires_directory(self):
        config = UploadConfig(bucket_name=DEFAULT_BUCKET, default_bucket=DEFAULT_BUCKET)

        with pytest.raises(ConfigurationError, match="--dir"):
            config.validate()

    def test_other_bucket_without_directory(self):
        UploadConfig(bucket_name="my-bucket", default_bucket=DEFAULT_BUCKET).validate()

    def test_empty_bucket(self):
        with pytest.raises(ConfigurationError, match="bucket"):
            UploadConfig(bucket_name="", directory="v1").validate()

    def test_invalid_concurrency(self):
        with pytest.raises(ConfigurationError, match="concurrency"):
            make_config(concurrency=0).validate()


class TestUploadResult:
    """Test UploadResult labels."""

    def make_result(self, **overrides) -> UploadResult:
        values = dict(
            filename="app.js",
            object_key="v1/app.abc.js",
            url="https://assets.example.com/v1/app.abc.js",
            outcome=FileOutcome.SKIPPED,
            already_exists=False,
        )
        values.update(overrides)
        return UploadResult(**values)

    def test_uploaded_label(self):
        assert self.make_result(outcome=FileOutcome.UPLOADED).label == "Uploaded"

    def test_skipped_label(self):
        assert self.make_result(already_exists=True).label == "Skipped"
        assert self.make_result(already_exists=True, dry_run=True).label == "Skipped"

    def test_planned_label(self):
        assert self.make_result(dry_run=True).label == "Planned"


class TestUploadFile:
    """Test upload_file for a single file."""

    def test_versionable_file(self, asset_dir, fake_storage):
        result = upload_file("app.js", make_config(), fake_storage)
        fingerprint = md5_of("app.js")

        assert result.object_key == f"v1/app.{fingerprint}.js"
        assert result.url == f"https://assets.example.com/v1/app.{fingerprint}.js"
        assert result.outcome == FileOutcome.UPLOADED
        assert result.file_size_bytes == Path("app.js").stat().st_size

    def test_uploads_full_content(self, asset_dir, fake_storage):
        """Test the uploaded bytes are the whole file, not what fingerprinting left."""
        result = upload_file("style.css", make_config(), fake_storage)

        assert fake_storage.objects[(DEFAULT_BUCKET, result.object_key)] == (
            Path("style.css").read_bytes()
        )

    def test_plain_file_keeps_name(self, asset_dir, fake_storage):
        result = upload_file("logo.png", make_config(), fake_storage)

        assert result.object_key == "v1/logo.png"
        assert result.url == "https://assets.example.com/v1/logo.png"

    def test_existing_object_is_skipped(self, asset_dir):
        storage = FakeStorage(existing={(DEFAULT_BUCKET, "v1/logo.png"): b"old"})

        result = upload_file("logo.png", make_config(), storage)

        assert result.outcome == FileOutcome.SKIPPED
        assert result.already_exists is True
        assert storage.uploads == []

    def test_missing_file(self, asset_dir, fake_storage):
        with pytest.raises(InputError, match="missing.js"):
            upload_file("missing.js", make_config(), fake_storage)

        assert fake_storage.exists_calls == []

    def test_file_outside_working_directory(self, asset_dir, fake_storage):
        (asset_dir.parent / "outside.png").write_bytes(b"\x89PNG")

        with pytest.raises(InputError, match="outside the working directory"):
            upload_file("../outside.png", make_config(), fake_storage)

        assert fake_storage.exists_calls == []

    def test_generic_endpoint_for_other_bucket(self, asset_dir, fake_storage):
        config = make_config(bucket_name="my-bucket", directory="")

        result = upload_file("logo.png", config, fake_storage)

        assert result.object_key == "logo.png"
        assert result.url == "https://storage.googleapis.com/my-bucket/logo.png"
        assert fake_storage.uploads == [("my-bucket", "logo.png")]


class TestVersionAndUploadFiles:
    """Test version_and_upload_files batch behavior."""

    def test_example_scenario(self, asset_dir, fake_storage):
        """Test app.js and style.css are versioned and logo.png is not."""
        batch = version_and_upload_files(FILES, make_config(), fake_storage)
        js_hash = md5_of("app.js")
        css_hash = md5_of("style.css")

        assert batch.manifest == {
            "app.js": f"https://assets.example.com/v1/app.{js_hash}.js",
            "style.css": f"https://assets.example.com/v1/style.{css_hash}.css",
            "logo.png": "https://assets.example.com/v1/logo.png",
        }
        assert fake_storage.uploads == [
            (DEFAULT_BUCKET, f"v1/app.{js_hash}.js"),
            (DEFAULT_BUCKET, f"v1/style.{css_hash}.css"),
            (DEFAULT_BUCKET, "v1/logo.png"),
        ]
        assert batch.uploaded == 3
        assert batch.skipped == 0

    def test_rerun_is_idempotent(self, asset_dir, fake_storage):
        """Test a second run over unchanged files transfers nothing."""
        first = version_and_upload_files(FILES, make_config(), fake_storage)
        uploads_after_first = list(fake_storage.uploads)

        second = version_and_upload_files(FILES, make_config(), fake_storage)

        assert second.manifest == first.manifest
        assert fake_storage.uploads == uploads_after_first
        assert all(r.outcome == FileOutcome.SKIPPED for r in second.results)
        assert [r.label for r in second.results] == ["Skipped"] * 3

    def test_changed_content_gets_new_key(self, asset_dir, fake_storage):
        first = version_and_upload_files(FILES, make_config(), fake_storage)
        Path("app.js").write_bytes(b"console.log('changed');\n")

        second = version_and_upload_files(FILES, make_config(), fake_storage)

        assert second.manifest["app.js"] != first.manifest["app.js"]
        assert second.manifest["logo.png"] == first.manifest["logo.png"]
        assert [r.outcome for r in second.results] == [
            FileOutcome.UPLOADED,
            FileOutcome.SKIPPED,
            FileOutcome.SKIPPED,
        ]

    def test_dry_run(self, asset_dir, fake_storage):
        """Test a dry run checks every key but uploads nothing."""
        batch = version_and_upload_files(FILES, make_config(dry_run=True), fake_storage)

        assert fake_storage.uploads == []
        assert len(fake_storage.exists_calls) == 3
        assert [r.label for r in batch.results] == ["Planned"] * 3
        assert len(batch.manifest) == 3

    def test_progress_callback_in_order(self, asset_dir, fake_storage):
        seen = []

        version_and_upload_files(FILES, make_config(), fake_storage, on_result=seen.append)

        assert [r.filename for r in seen] == FILES

    def test_open_failure_aborts_batch(self, asset_dir, fake_storage):
        files = ["app.js", "missing.css", "logo.png"]

        with pytest.raises(InputError, match="missing.css"):
            version_and_upload_files(files, make_config(), fake_storage)

        assert len(fake_storage.uploads) == 1
        assert (DEFAULT_BUCKET, "v1/logo.png") not in fake_storage.exists_calls

    def test_transfer_failure_aborts_batch(self, asset_dir):
        css_key = f"v1/style.{md5_of('style.css')}.css"
        storage = FakeStorage(fail_upload={css_key})

        with pytest.raises(TransferError, match=css_key):
            version_and_upload_files(FILES, make_config(), storage)

        assert (DEFAULT_BUCKET, "v1/logo.png") not in storage.exists_calls

    def test_existence_check_failure_aborts_batch(self, asset_dir):
        storage = FakeStorage(fail_exists={"v1/logo.png"})

        with pytest.raises(ExistenceCheckError):
            version_and_upload_files(FILES, make_config(), storage)

    def test_invalid_config_fails_before_any_work(self, asset_dir, fake_storage):
        config = make_config(directory="")

        with pytest.raises(ConfigurationError):
            version_and_upload_files(FILES, config, fake_storage)

        assert fake_storage.exists_calls == []

    def test_empty_file_list(self, fake_storage):
        batch = version_and_upload_files([], make_config(), fake_storage)

        assert isinstance(batch, BatchResult)
        assert batch.manifest == {}

    def test_records_metrics(self, asset_dir):
        storage = FakeStorage(existing={(DEFAULT_BUCKET, "v1/logo.png"): b"old"})
        metrics = UploadMetrics()

        version_and_upload_files(FILES, make_config(), storage, metrics=metrics)

        registry = metrics.registry
        assert registry.get_sample_value(
            "static_upload_files_total", {"outcome": "uploaded"}
        ) == 2
        assert registry.get_sample_value(
            "static_upload_files_total", {"outcome": "skipped"}
        ) == 1


class TestConcurrentUpload:
    """Test version_and_upload_files with a worker pool."""

    @pytest.fixture
    def many_files(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        names = []
        for i in range(8):
            name = f"chunk{i}.js"
            (tmp_path / name).write_bytes(f"export const n = {i};\n".encode())
            names.append(name)
        return names

    def test_results_follow_input_order(self, many_files, fake_storage):
        seen = []

        batch = version_and_upload_files(
            many_files, make_config(concurrency=4), fake_storage, on_result=seen.append
        )

        assert [r.filename for r in batch.results] == many_files
        assert [r.filename for r in seen] == many_files
        assert list(batch.manifest) == many_files
        assert len(fake_storage.uploads) == 8

    def test_same_manifest_as_sequential(self, many_files):
        sequential = version_and_upload_files(many_files, make_config(), FakeStorage())
        concurrent = version_and_upload_files(
            many_files, make_config(concurrency=3), FakeStorage()
        )

        assert concurrent.manifest == sequential.manifest

    def test_earliest_failure_is_raised(self, many_files):
        key_2 = f"v1/chunk2.{md5_of('chunk2.js')}.js"
        key_5 = f"v1/chunk5.{md5_of('chunk5.js')}.js"
        storage = FakeStorage(fail_upload={key_2, key_5})

        with pytest.raises(TransferError, match=key_2):
            version_and_upload_files(many_files, make_config(concurrency=8), storage)
