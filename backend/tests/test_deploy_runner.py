from __future__ import annotations

import os
from pathlib import Path
import sys
import tempfile
import unittest
from unittest.mock import patch
import zipfile

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from studio.core.config import Settings
from studio.db.base import Base
from studio.domain.pipeline_result import DeployFailure, FailureCode
from studio.models import ModuleRecorder
from studio.services.deploy_runner import (
    NO_ARCHIVE_MESSAGE,
    NO_BUILD_DIR_MESSAGE,
    clear_database,
    deploy_artifact,
    update_app,
)


def _write_war(libs_dir: Path, name: str, files: dict[str, str]) -> Path:
    libs_dir.mkdir(parents=True, exist_ok=True)
    archive = libs_dir / name
    with zipfile.ZipFile(archive, "w") as bundle:
        for entry, content in files.items():
            bundle.writestr(entry, content)
    return archive


class DeployArtifactTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.build_dir = self.root / "project"
        self.webapp = self.root / "webapps"
        self.build_dir.mkdir()
        self.webapp.mkdir()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_unpacks_archive_and_replaces_previous_deployment(self) -> None:
        _write_war(
            self.build_dir / "build" / "libs",
            "studio-app.war",
            {"index.html": "<html/>", "WEB-INF/web.xml": "<web-app/>"},
        )
        stale = self.webapp / "studio-app" / "stale.txt"
        stale.parent.mkdir()
        stale.write_text("old", encoding="utf-8")

        app_dir = deploy_artifact(build_dir=self.build_dir, webapp_path=self.webapp)

        self.assertEqual(app_dir, self.webapp / "studio-app")
        self.assertEqual((app_dir / "index.html").read_text(encoding="utf-8"), "<html/>")
        self.assertTrue((app_dir / "WEB-INF" / "web.xml").exists())
        self.assertFalse(stale.exists())

    def test_ignores_files_with_other_extensions(self) -> None:
        libs_dir = self.build_dir / "build" / "libs"
        _write_war(libs_dir, "a-sources.jar", {"A.java": ""})
        _write_war(libs_dir, "studio-app.war", {"index.html": "ok"})

        app_dir = deploy_artifact(build_dir=self.build_dir, webapp_path=self.webapp)

        self.assertEqual(app_dir.name, "studio-app")

    def test_missing_libs_dir_raises_no_build_dir(self) -> None:
        with self.assertRaises(DeployFailure) as ctx:
            deploy_artifact(build_dir=self.build_dir, webapp_path=self.webapp)

        self.assertEqual(ctx.exception.code, FailureCode.DEPLOY_NO_BUILD_DIR)
        self.assertEqual(str(ctx.exception), NO_BUILD_DIR_MESSAGE)

    def test_libs_without_archive_raises_no_archive(self) -> None:
        (self.build_dir / "build" / "libs").mkdir(parents=True)

        with self.assertRaises(DeployFailure) as ctx:
            deploy_artifact(build_dir=self.build_dir, webapp_path=self.webapp)

        self.assertEqual(ctx.exception.code, FailureCode.DEPLOY_NO_ARCHIVE)
        self.assertEqual(str(ctx.exception), NO_ARCHIVE_MESSAGE)

    def test_corrupt_archive_raises_deploy_failed(self) -> None:
        libs_dir = self.build_dir / "build" / "libs"
        libs_dir.mkdir(parents=True)
        (libs_dir / "broken.war").write_text("not a zip", encoding="utf-8")

        with self.assertRaises(DeployFailure) as ctx:
            deploy_artifact(build_dir=self.build_dir, webapp_path=self.webapp)

        self.assertEqual(ctx.exception.code, FailureCode.DEPLOY_FAILED)


class UpdateAppTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine("sqlite+pysqlite:///:memory:")
        Base.metadata.create_all(self.engine)
        self.session_factory = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        (self.root / "project").mkdir()
        (self.root / "webapps").mkdir()
        self.settings = Settings(build_dir=str(self.root / "project"), webapp_path=str(self.root / "webapps"))

    def tearDown(self) -> None:
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()
        self._tmp.cleanup()

    def test_update_reports_success(self) -> None:
        _write_war(self.root / "project" / "build" / "libs", "app.war", {"index.html": "ok"})

        with self.session_factory() as db:
            result = update_app(db=db, reset=False, settings=self.settings)

        self.assertTrue(result.ok)
        self.assertEqual(result.message, "App updated successfully")
        self.assertTrue((self.root / "webapps" / "app" / "index.html").exists())

    def test_missing_webapp_setting_is_a_configuration_error(self) -> None:
        settings = Settings(build_dir=str(self.root / "project"), webapp_path=None)

        with self.session_factory() as db:
            result = update_app(db=db, reset=False, settings=settings)

        self.assertFalse(result.ok)
        self.assertEqual(result.code, FailureCode.CONFIGURATION_ERROR)
        self.assertTrue(result.message.startswith("Error in update, please check the log."))

    def test_reset_failure_uses_reset_wording(self) -> None:
        libs_dir = self.root / "project" / "build" / "libs"
        libs_dir.mkdir(parents=True)
        (libs_dir / "app.war").write_text("not a zip", encoding="utf-8")

        with self.session_factory() as db, patch("studio.services.deploy_runner.clear_database") as clear_mock:
            result = update_app(db=db, reset=True, settings=self.settings)

        self.assertFalse(result.ok)
        self.assertTrue(result.message.startswith("Error in reset, please check the log."))
        clear_mock.assert_not_called()

    def test_reset_success_clears_schema(self) -> None:
        _write_war(self.root / "project" / "build" / "libs", "app.war", {"index.html": "ok"})
        with self.session_factory() as db:
            db.add(ModuleRecorder(name="default"))
            db.commit()

        with self.session_factory() as db:
            result = update_app(db=db, reset=True, settings=self.settings)

        self.assertTrue(result.ok)
        self.assertEqual(result.message, "App reset successfully")
        with self.session_factory() as db:
            self.assertEqual(db.query(ModuleRecorder).count(), 0)

    def test_clear_database_recreates_tables(self) -> None:
        with self.session_factory() as db:
            db.add(ModuleRecorder(name="default"))
            db.commit()
            clear_database(db=db)

        with self.session_factory() as db:
            self.assertEqual(db.query(ModuleRecorder).count(), 0)
            db.add(ModuleRecorder(name="fresh"))
            db.commit()
            self.assertEqual(db.query(ModuleRecorder).count(), 1)


if __name__ == "__main__":
    unittest.main()
