"""Tests for EntityReferenceTreeBuilder (cache orchestration and access)."""

import pytest

from reftree_engine.errors import BundleNotFound, EntityTypeNotFound
from reftree_engine.models import FieldDefinition, FieldValues
from reftree_engine.settings import DEFAULT_CACHE_TTL, TreeSettings
from reftree_engine.store.memory import MemoryAccount, MemoryEntity, reference, text

from tests.conftest import ENTITY_TYPE, NAME_FIELD, PARENT_FIELD, SEE_ALSO_FIELD


def as_tuples(nodes):
    return [(n.id, n.parent) for n in nodes]


class TestLoadTree:

    def test_country_scenario(self, builder):
        nodes = builder.load_tree(ENTITY_TYPE, "country")
        assert as_tuples(nodes) == [("country", "#"), (1, "country"), (2, 1), (3, 2)]

    def test_root_invariant(self, builder):
        nodes = builder.load_tree(ENTITY_TYPE, "country", "de")
        assert nodes[0].parent == "#"
        assert nodes[0].id == "country"

    def test_attachment_invariant(self, builder, storage):
        storage.add(
            MemoryEntity(
                entity_id=10,
                bundle_id="country",
                title="Lost",
                values={NAME_FIELD: text("Lost"), PARENT_FIELD: reference(404)},
                entity_type=ENTITY_TYPE,
            )
        )
        nodes = builder.load_tree(ENTITY_TYPE, "country")
        ids = {str(n.id) for n in nodes}
        for node in nodes[1:]:
            assert node.parent == "country" or str(node.parent) in ids

    def test_orphans_kept_when_guard_disabled(self, make_builder, storage):
        storage.add(
            MemoryEntity(
                entity_id=10,
                bundle_id="country",
                title="Lost",
                values={PARENT_FIELD: reference(404)},
                entity_type=ENTITY_TYPE,
            )
        )
        builder = make_builder(settings=TreeSettings(reattach_orphans=False))
        nodes = builder.load_tree(ENTITY_TYPE, "country")
        assert nodes[-1].parent == 404

    def test_cycles_broken(self, make_builder, storage):
        storage.add(
            MemoryEntity(entity_id=20, bundle_id="country", title="A", values={PARENT_FIELD: reference(21)})
        )
        storage.add(
            MemoryEntity(entity_id=21, bundle_id="country", title="B", values={PARENT_FIELD: reference(20)})
        )
        nodes = make_builder().load_tree(ENTITY_TYPE, "country")
        assert as_tuples(nodes)[-2:] == [(20, "country"), (21, 20)]

    def test_empty_parent_field_does_not_fall_through(
        self, builder, schema_registry, country_fields, country_entities, log_messages
    ):
        schema_registry.define(ENTITY_TYPE, "country", country_fields + [FieldDefinition(name=SEE_ALSO_FIELD)])
        africa = country_entities[0]
        africa.values[PARENT_FIELD] = FieldValues(main_property="target_id", items=[])
        africa.values[SEE_ALSO_FIELD] = reference(3)
        nodes = builder.load_tree(ENTITY_TYPE, "country")
        assert as_tuples(nodes) == [("country", "#"), (1, "country"), (2, 1), (3, 2)]
        assert not any("cycle" in m for m in log_messages)

    def test_parent_and_max_depth_ignored(self, builder):
        assert builder.load_tree(ENTITY_TYPE, "country", "en", parent=2, max_depth=1) == builder.load_tree(
            ENTITY_TYPE, "country", "en"
        )

    def test_configured_parent_field(self, make_builder):
        builder = make_builder(settings=TreeSettings(parent_field=NAME_FIELD))
        nodes = builder.load_tree(ENTITY_TYPE, "country")
        assert [n.parent for n in nodes[1:]] == ["country", "country", "country"]

    def test_unknown_bundle_is_fatal(self, builder):
        with pytest.raises(BundleNotFound):
            builder.load_tree(ENTITY_TYPE, "city")

    def test_unknown_entity_type_is_fatal(self, builder, schema_registry, country_fields):
        schema_registry.define("node", "country", country_fields)
        with pytest.raises(EntityTypeNotFound):
            builder.load_tree("node", "country")

    def test_failed_build_is_not_cached(self, builder, cache_backend):
        with pytest.raises(BundleNotFound):
            builder.load_tree(ENTITY_TYPE, "city")
        assert cache_backend.sets == []


class TestWildcardBundle:

    def test_returns_empty_without_touching_cache_or_storage(self, builder, cache_backend, storage, log_messages):
        assert builder.load_tree(ENTITY_TYPE, "*") == []
        assert cache_backend.gets == []
        assert cache_backend.sets == []
        assert storage.queries == []
        assert any("all bundles" in m for m in log_messages)


class TestAccess:

    def test_denied_user_gets_empty_tree(self, make_builder, cache_backend, log_messages):
        guest = MemoryAccount(name="guest")
        builder = make_builder(user=guest)
        assert builder.load_tree(ENTITY_TYPE, "country") == []
        assert cache_backend.gets == []
        warning = next(m for m in log_messages if "lacks permission" in m)
        assert "guest" in warning
        assert "country" in warning
        assert "access content" in warning

    def test_has_access_for_explicit_user(self, builder):
        assert builder.has_access(MemoryAccount(name="guest")) is False
        assert builder.has_access(MemoryAccount(name="reader", permissions={"access content"})) is True

    def test_has_access_defaults_to_current_user(self, builder):
        assert builder.has_access() is True

    def test_custom_permission(self, make_builder, editor):
        builder = make_builder(settings=TreeSettings(access_permission="view trees"))
        assert builder.has_access(editor) is False


class TestCaching:

    def test_second_call_served_from_cache(self, builder, storage, cache_backend):
        first = builder.load_tree(ENTITY_TYPE, "country", "en")
        second = builder.load_tree(ENTITY_TYPE, "country", "en")
        assert [n.to_dict() for n in first] == [n.to_dict() for n in second]
        assert len(storage.queries) == 1
        assert cache_backend.sets == ["entity_reference_tree:country_en"]
        assert builder.cache.get_stats()["hits"] == 1

    def test_cache_key_language_sensitive(self, builder, cache_backend):
        english = builder.load_tree(ENTITY_TYPE, "country", "en")
        german = builder.load_tree(ENTITY_TYPE, "country", "de")
        assert english[1].text == "Africa"
        assert german[1].text == "Afrika"
        assert cache_backend.sets == ["entity_reference_tree:country_en", "entity_reference_tree:country_de"]

    def test_current_language_used_for_key(self, make_builder, cache_backend):
        builder = make_builder(langcode="de")
        nodes = builder.load_tree(ENTITY_TYPE, "country")
        assert nodes[1].text == "Afrika"
        assert cache_backend.sets == ["entity_reference_tree:country_de"]

    def test_entry_tags_and_expiry(self, builder, cache_backend, clock):
        builder.load_tree(ENTITY_TYPE, "country", "en")
        entry = cache_backend.get("entity_reference_tree:country_en")
        assert entry.expire == clock.now() + DEFAULT_CACHE_TTL
        assert entry.tags == [
            f"{ENTITY_TYPE}_bundle:country",
            f"{ENTITY_TYPE}:1",
            f"{ENTITY_TYPE}:2",
            f"{ENTITY_TYPE}:3",
        ]

    def test_skipped_entities_not_tagged(self, builder, cache_backend, country_entities):
        country_entities[0].viewable = False
        builder.load_tree(ENTITY_TYPE, "country", "en")
        entry = cache_backend.get("entity_reference_tree:country_en")
        assert f"{ENTITY_TYPE}:1" not in entry.tags

    def test_rebuild_after_expiry(self, builder, storage, clock):
        builder.load_tree(ENTITY_TYPE, "country", "en")
        clock.advance(DEFAULT_CACHE_TTL + 1)
        builder.load_tree(ENTITY_TYPE, "country", "en")
        assert len(storage.queries) == 2

    def test_entity_tag_invalidation_rebuilds(self, builder, storage, country_entities):
        builder.load_tree(ENTITY_TYPE, "country", "en")
        country_entities[2].title = "Joburg"
        builder.invalidate([f"{ENTITY_TYPE}:3"])
        nodes = builder.load_tree(ENTITY_TYPE, "country", "en")
        assert nodes[-1].text == "Joburg"
        assert len(storage.queries) == 2

    def test_unrelated_tag_keeps_entry(self, builder, storage):
        builder.load_tree(ENTITY_TYPE, "country", "en")
        builder.invalidate([f"{ENTITY_TYPE}:99"])
        builder.load_tree(ENTITY_TYPE, "country", "en")
        assert len(storage.queries) == 1

    def test_caller_mutation_does_not_leak_into_cache(self, builder):
        nodes = builder.load_tree(ENTITY_TYPE, "country", "en")
        nodes[1].text = "changed"
        nodes.clear()
        again = builder.load_tree(ENTITY_TYPE, "country", "en")
        assert again[1].text == "Africa"

    def test_custom_prefix_and_ttl(self, make_builder, cache_backend, clock):
        builder = make_builder(settings=TreeSettings(cache_prefix="tree:", cache_ttl=60))
        builder.load_tree(ENTITY_TYPE, "country", "en")
        assert cache_backend.sets == ["tree:country_en"]
        assert cache_backend.get("tree:country_en").expire == clock.now() + 60


class TestNodeShape:

    def test_create_tree_node_and_id(self, builder):
        nodes = builder.load_tree(ENTITY_TYPE, "country", "en")
        widget = builder.create_tree_node(nodes[2], selected=[2])
        assert widget.to_dict() == {"id": 2, "parent": 1, "text": "South Africa", "state": {"selected": True}}
        assert builder.get_node_id(nodes[0]) == "country"
