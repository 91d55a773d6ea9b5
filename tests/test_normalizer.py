"""Tests for asset record normalization."""

from catalog_export.catalog.normalizer import RecordNormalizer
from catalog_export.catalog.types import AttributeKind, RelationDirection

from conftest import community, domain


def graph_record(**extra):
    record = {
        "id": "a1",
        "displayName": "Revenue",
        "type": {"name": "Business Term"},
        "status": {"name": "Accepted"},
        "domain": {
            "id": "d1",
            "name": "Glossary",
            "type": {"name": "Glossary"},
            "parent": {"id": "c1", "name": "Finance"},
        },
        "tags": [{"name": "pii"}, {"name": "gold"}, {"name": "pii"}],
    }
    record.update(extra)
    return record


class TestNormalizeAsset:
    def test_five_groups_in_fixed_order(self):
        raw = graph_record(
            multiValueAttributes=[{"type": {"name": "Regions"}, "stringValues": ["EU", "US"]}],
            dateAttributes=[{"type": {"name": "Reviewed"}, "dateValue": 1700000000000}],
            numericAttributes=[{"type": {"name": "Score"}, "numericValue": 4.5}],
            booleanAttributes=[{"type": {"name": "Critical"}, "booleanValue": True}],
            stringAttributes=[{"type": {"name": "Definition"}, "stringValue": "Money in"}],
        )

        asset = RecordNormalizer().normalize_asset(raw)

        assert [a.kind for a in asset.attributes] == [
            AttributeKind.STRING,
            AttributeKind.BOOLEAN,
            AttributeKind.NUMERIC,
            AttributeKind.DATE,
            AttributeKind.MULTI_VALUE,
        ]
        assert [a.value for a in asset.attributes] == ["Money in", True, 4.5, 1700000000000, ["EU", "US"]]
        assert asset.attributes[0].to_dict() == {"type": "Definition", "value": "Money in", "dataType": "string"}

    def test_within_group_source_order(self):
        raw = graph_record(stringAttributes=[
            {"type": {"name": "Definition"}, "stringValue": "first"},
            {"type": {"name": "Note"}, "stringValue": "second"},
        ])

        asset = RecordNormalizer().normalize_asset(raw)

        assert [a.type_name for a in asset.attributes] == ["Definition", "Note"]

    def test_no_attributes_or_relations_are_omitted(self):
        asset = RecordNormalizer().normalize_asset(graph_record())
        data = asset.to_dict()

        assert asset.attributes == ()
        assert "attributes" not in data
        assert "relations" not in data
        assert "responsibilities" not in data
        assert data["tags"] == ["pii", "gold"]

    def test_placement_from_domain_parent(self):
        asset = RecordNormalizer().normalize_asset(graph_record())

        assert asset.name == "Revenue"
        assert asset.domain.to_dict() == {"id": "d1", "name": "Glossary", "type": "Glossary"}
        assert asset.community.to_dict() == {"id": "c1", "name": "Finance"}
        assert asset.type_name == "Business Term"
        assert asset.status == "Accepted"

    def test_missing_multi_value_defaults_to_empty(self):
        raw = graph_record(multiValueAttributes=[{"type": {"name": "Regions"}, "stringValues": None}])

        assert RecordNormalizer().normalize_asset(raw).attributes[0].value == []

    def test_relations_read_from_asset_side(self):
        raw = graph_record(
            incomingRelations=[{
                "source": {"id": "s1", "displayName": "Sales Report", "type": {"name": "Report"}},
                "type": {"role": "uses", "corole": "used by"},
            }],
            outgoingRelations=[{
                "target": {"id": "t1", "displayName": "Revenue Table", "type": {"name": "Table"}},
                "type": {"role": "is represented by", "corole": "represents"},
            }],
        )

        relations = RecordNormalizer().normalize_asset(raw).relations

        assert [r.direction for r in relations] == [RelationDirection.OUTGOING, RelationDirection.INCOMING]
        outgoing, incoming = relations
        assert outgoing.relation_type == "is represented by"
        assert outgoing.relation_type_reverse == "represents"
        assert outgoing.related_asset.id == "t1"
        assert incoming.relation_type == "used by"
        assert incoming.relation_type_reverse == "uses"
        assert incoming.to_dict() == {
            "direction": "incoming",
            "relationType": "used by",
            "relationTypeReverse": "uses",
            "relatedAsset": {"id": "s1", "displayName": "Sales Report", "type": "Report"},
        }


class TestNormalizeRestAsset:
    def test_listings_and_placement(self):
        glossary = domain("d1", "Glossary", "c1", "Finance", type_name="Glossary")
        finance = community("c1", "Finance")
        raw = {
            "id": "a1",
            "name": "Revenue",
            "displayName": "Revenue",
            "type": {"name": "Business Term"},
            "status": {"name": "Accepted"},
            "domain": {"id": "d1"},
        }
        attributes = [
            {"type": {"name": "Definition"}, "value": "Money in", "discriminator": "StringAttribute"},
            {"type": {"name": "Critical"}, "value": False, "discriminator": "BooleanAttribute"},
            {"type": {"name": "Reviewed"}, "value": 1700000000000, "discriminator": "DateAttribute"},
            {"type": {"name": "Regions"}, "value": ["EU"], "discriminator": "MultiValueListAttribute"},
            {"type": {"name": "Score"}, "value": 3},
        ]
        relations = [
            {"source": {"id": "s1", "name": "Sales Report"}, "target": {"id": "a1", "name": "Revenue"},
             "type": {"role": "uses", "coRole": "used by"}},
            {"source": {"id": "a1", "name": "Revenue"}, "target": {"id": "t1", "name": "Revenue Table"},
             "type": {"role": "is represented by", "coRole": "represents"}},
        ]

        asset = RecordNormalizer().normalize_rest_asset(raw, attributes, relations, glossary, finance)

        assert [a.kind for a in asset.attributes] == [
            AttributeKind.STRING,
            AttributeKind.BOOLEAN,
            AttributeKind.DATE,
            AttributeKind.MULTI_VALUE,
            AttributeKind.NUMERIC,
        ]
        assert asset.domain.name == "Glossary"
        assert asset.community.name == "Finance"

        outgoing, incoming = asset.relations
        assert outgoing.direction is RelationDirection.OUTGOING
        assert outgoing.related_asset.display_name == "Revenue Table"
        assert incoming.relation_type == "used by"
        assert incoming.related_asset.id == "s1"

    def test_shape_wins_over_contradicting_discriminator(self):
        raw = {"id": "a1", "name": "Revenue"}
        attributes = [{"type": {"name": "Flag"}, "value": True, "discriminator": "StringAttribute"}]

        asset = RecordNormalizer().normalize_rest_asset(raw, attributes)

        assert asset.attributes[0].kind is AttributeKind.BOOLEAN
        assert asset.relations == ()
