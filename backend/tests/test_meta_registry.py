from __future__ import annotations

import os
from pathlib import Path
import sys
import unittest

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from studio.db.base import Base
from studio.models import MetaAction, MetaView
from studio.services.meta_registry import (
    DEFAULT_VIEW_PRIORITY,
    next_view_priority,
    upsert_meta_action,
    upsert_meta_view,
)
from studio.services.view_elements import GeneratedAction, GeneratedView, action_type_tag, make_element


def _view(name: str = "partner-form", *, title: str = "Partner", xml_id: str | None = None) -> GeneratedView:
    element = make_element("form", {"name": name, "title": title, "model": "com.example.Partner", "id": xml_id})
    return GeneratedView(
        name=name,
        type="form",
        element=element,
        model="com.example.Partner",
        title=title,
        xml_id=xml_id,
    )


class MetaViewUpsertTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine("sqlite+pysqlite:///:memory:")
        Base.metadata.create_all(self.engine)
        self.session_factory = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)

    def tearDown(self) -> None:
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def test_next_view_priority(self) -> None:
        self.assertEqual(next_view_priority(None), DEFAULT_VIEW_PRIORITY)
        self.assertEqual(next_view_priority(31), 32)

    def test_first_upsert_creates_with_default_priority(self) -> None:
        with self.session_factory() as db:
            meta_view, created = upsert_meta_view(db=db, view=_view(), module_name="studio-custom")

            self.assertTrue(created)
            self.assertEqual(meta_view.priority, 20)
            self.assertEqual(meta_view.module, "studio-custom")
            self.assertEqual(meta_view.model, "com.example.Partner")
            self.assertEqual(meta_view.title, "Partner")
            self.assertIn('name="partner-form"', meta_view.xml)

    def test_repeated_upsert_updates_same_entity(self) -> None:
        with self.session_factory() as db:
            first, created_first = upsert_meta_view(db=db, view=_view(title="Old"), module_name="studio-custom")
            second, created_second = upsert_meta_view(db=db, view=_view(title="New"), module_name="studio-custom")

            self.assertTrue(created_first)
            self.assertFalse(created_second)
            self.assertEqual(first.id, second.id)
            self.assertEqual(second.priority, 20)
            self.assertIn('title="New"', second.xml)
            self.assertEqual(db.query(MetaView).count(), 1)

    def test_repeated_upsert_with_xml_id_is_idempotent(self) -> None:
        with self.session_factory() as db:
            first, _ = upsert_meta_view(db=db, view=_view(xml_id="custom-partner-form"), module_name="m")
            second, created = upsert_meta_view(db=db, view=_view(xml_id="custom-partner-form"), module_name="m")

            self.assertFalse(created)
            self.assertEqual(first.id, second.id)
            self.assertEqual(db.query(MetaView).count(), 1)

    def test_new_xml_id_gets_priority_above_existing_same_name(self) -> None:
        with self.session_factory() as db:
            db.add(MetaView(name="partner-form", type="form", xml_id="base-partner-form", priority=25, module="base"))
            db.add(MetaView(name="partner-form", type="grid", xml_id=None, priority=90, module="base"))
            db.commit()

            meta_view, created = upsert_meta_view(db=db, view=_view(xml_id="custom-partner-form"), module_name="m")

            self.assertTrue(created)
            self.assertEqual(meta_view.priority, 26)
            self.assertEqual(meta_view.xml_id, "custom-partner-form")
            self.assertEqual(db.query(MetaView).filter(MetaView.name == "partner-form").count(), 3)

    def test_lookup_without_xml_id_reuses_existing_same_name_and_type(self) -> None:
        with self.session_factory() as db:
            existing = MetaView(name="partner-form", type="form", xml_id="base-partner-form", priority=25, module="base")
            db.add(existing)
            db.commit()

            meta_view, created = upsert_meta_view(db=db, view=_view(), module_name="m")

            self.assertFalse(created)
            self.assertEqual(meta_view.id, existing.id)
            self.assertEqual(meta_view.priority, 25)
            self.assertEqual(meta_view.module, "base")


class MetaActionUpsertTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine("sqlite+pysqlite:///:memory:")
        Base.metadata.create_all(self.engine)
        self.session_factory = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)

    def tearDown(self) -> None:
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def test_action_type_tag_splits_capitalization_boundaries(self) -> None:
        self.assertEqual(action_type_tag("ActionRecord"), "action-record")
        self.assertEqual(action_type_tag("ActionView"), "action-view")
        self.assertEqual(action_type_tag("ActionWS"), "action-ws")
        self.assertEqual(action_type_tag("Action"), "action")

    def test_upsert_creates_then_updates_by_name(self) -> None:
        def _action(expr: str) -> GeneratedAction:
            element = make_element("action-record", {"name": "action-partner-defaults", "model": "com.example.Partner"})
            element.append(make_element("field", {"name": "code", "expr": expr}))
            return GeneratedAction(
                name="action-partner-defaults",
                kind="ActionRecord",
                element=element,
                model="com.example.Partner",
            )

        with self.session_factory() as db:
            first, created_first = upsert_meta_action(db=db, action=_action("'A'"), module_name="m")
            second, created_second = upsert_meta_action(db=db, action=_action("'B'"), module_name="other")

            self.assertTrue(created_first)
            self.assertFalse(created_second)
            self.assertEqual(first.id, second.id)
            self.assertEqual(second.type, "action-record")
            self.assertEqual(second.module, "m")
            self.assertIn("'B'", second.xml)
            self.assertEqual(db.query(MetaAction).count(), 1)


if __name__ == "__main__":
    unittest.main()
