"""
Property-based tests for the RDAP response normalizer.

Covers registrar extraction, event slot mapping, date formatting, and the
pass-through of status codes, nameservers and DNSSEC records.
"""

import copy
import string
from datetime import datetime, timezone

from hypothesis import given, settings
from hypothesis import strategies as st

from rdap_lookup.normalizer import (
    INVALID_DATE,
    RdapNormalizer,
    extract_registrar_name,
    format_rdap_date,
)

SERVER = "https://rdap.example-registry.test/"


def normalize(raw, **kwargs):
    kwargs.setdefault("rdap_server", SERVER)
    kwargs.setdefault("query_time_ms", 12)
    return RdapNormalizer().normalize(raw, **kwargs)


def registrar_entity(name="Example Registrar, Inc.", iana_id="9999", roles=("registrar",)):
    return {
        "objectClassName": "entity",
        "roles": list(roles),
        "vcardArray": [
            "vcard",
            [
                ["version", {}, "text", "4.0"],
                ["fn", {}, "text", name],
            ],
        ],
        "publicIds": [{"type": "IANA Registrar ID", "identifier": iana_id}],
    }


SAMPLE_OBJECT = {
    "objectClassName": "domain",
    "handle": "2336799_DOMAIN_COM-VRSN",
    "ldhName": "EXAMPLE.COM",
    "status": ["client delete prohibited", "client transfer prohibited"],
    "events": [
        {"eventAction": "registration", "eventDate": "1995-08-14T04:00:00Z"},
        {"eventAction": "expiration", "eventDate": "2025-08-13T04:00:00Z"},
        {"eventAction": "last changed", "eventDate": "2024-08-14T07:01:34Z"},
        {"eventAction": "last update of RDAP database", "eventDate": "2024-01-05T12:00:00Z"},
    ],
    "entities": [registrar_entity(name="RESERVED-Internet Assigned Numbers Authority", iana_id="376")],
    "nameservers": [
        {"objectClassName": "nameserver", "ldhName": "A.IANA-SERVERS.NET"},
        {
            "objectClassName": "nameserver",
            "ldhName": "B.IANA-SERVERS.NET",
            "ipAddresses": {"v4": ["199.43.133.53"], "v6": ["2001:500:8d::53"]},
        },
    ],
    "secureDNS": {
        "delegationSigned": True,
        "dsData": [
            {
                "keyTag": 370,
                "algorithm": 13,
                "digestType": 2,
                "digest": "BE74359954660069D5C63D200C39F5603827D7DD02B56F120EE9F3A86764247C",
            }
        ],
    },
}


@st.composite
def timestamp_strategy(draw) -> datetime:
    return draw(st.datetimes(
        min_value=datetime(1985, 1, 1),
        max_value=datetime(2100, 12, 31),
        timezones=st.just(timezone.utc),
    ))


def iso(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


class TestFullObject:
    """Normalization of a complete, well-formed domain object."""

    def test_sample_object(self) -> None:
        result = normalize(SAMPLE_OBJECT)

        assert result.domain_name == "EXAMPLE.COM"
        assert result.registry_handle == "2336799_DOMAIN_COM-VRSN"
        assert result.registrar_name == "RESERVED-Internet Assigned Numbers Authority"
        assert result.registrar_iana_id == "376"
        assert result.registration_date == "August 14, 1995"
        assert result.expiration_date == "August 13, 2025"
        assert result.last_changed_date == "August 14, 2024"
        assert result.rdap_database_updated_date == "January 5, 2024"
        assert result.nameservers[0].name == "A.IANA-SERVERS.NET"
        assert result.nameservers[0].ipv4 == ()
        assert result.nameservers[1].ipv4 == ("199.43.133.53",)
        assert result.nameservers[1].ipv6 == ("2001:500:8d::53",)
        assert result.dnssec.signed is True
        assert result.rdap_server == SERVER
        assert result.query_time_ms == 12
        assert result.warnings == ()

    def test_raw_object_retained_unmodified(self) -> None:
        raw = copy.deepcopy(SAMPLE_OBJECT)
        result = normalize(raw)
        assert result.raw_object is raw
        assert raw == SAMPLE_OBJECT

    def test_to_dict_uses_external_field_names(self) -> None:
        data = normalize(SAMPLE_OBJECT).to_dict()

        assert data["domainName"] == "EXAMPLE.COM"
        assert data["registrarIanaId"] == "376"
        assert data["dnssec"]["dsRecords"][0]["keyTag"] == 370
        assert data["nameservers"][1] == {
            "name": "B.IANA-SERVERS.NET",
            "ipv4": ["199.43.133.53"],
            "ipv6": ["2001:500:8d::53"],
        }
        assert data["rawObject"] is SAMPLE_OBJECT


class TestAbsentFields:
    """Missing optional members degrade to explicit absent values."""

    def test_empty_object(self) -> None:
        result = normalize({}, fallback_domain="example.com")

        assert result.domain_name == "example.com"
        assert result.registry_handle is None
        assert result.status_codes == ()
        assert result.nameservers == ()
        assert result.registrar_name is None
        assert result.registrar_iana_id is None
        assert result.registration_date is None
        assert result.expiration_date is None
        assert result.dnssec.signed is False
        assert result.dnssec.ds_records == ()

    def test_no_entities_means_no_registrar(self) -> None:
        raw = {k: v for k, v in SAMPLE_OBJECT.items() if k != "entities"}
        result = normalize(raw)
        assert result.registrar_name is None
        assert result.registrar_iana_id is None

    def test_absent_values_serialize_as_null(self) -> None:
        data = normalize({"ldhName": "example.com"}).to_dict()
        assert data["registrarName"] is None
        assert data["expirationDate"] is None
        assert data["statusCodes"] == []

    @given(garbage=st.one_of(
        st.none(), st.integers(), st.text(max_size=10),
        st.lists(st.integers(), max_size=3), st.dictionaries(st.text(max_size=5), st.integers(), max_size=3),
    ))
    @settings(max_examples=100)
    def test_shape_mismatch_never_raises(self, garbage) -> None:
        raw = {
            "ldhName": garbage,
            "handle": garbage,
            "status": garbage,
            "events": [garbage, {"eventAction": garbage, "eventDate": garbage}],
            "nameservers": [garbage, {"ldhName": garbage, "ipAddresses": garbage}],
            "entities": [garbage, {"roles": garbage, "vcardArray": garbage, "publicIds": garbage}],
            "secureDNS": garbage,
        }
        result = normalize(raw, fallback_domain="example.com")
        assert result.registrar_name is None
        assert result.dnssec.signed is False


class TestRegistrarExtraction:
    """Only the first registrar entity counts."""

    def test_first_registrar_wins(self) -> None:
        raw = {"entities": [
            registrar_entity(name="Technical Contact", iana_id="1", roles=("technical",)),
            registrar_entity(name="First Registrar", iana_id="100"),
            registrar_entity(name="Second Registrar", iana_id="200"),
        ]}
        result = normalize(raw)
        assert result.registrar_name == "First Registrar"
        assert result.registrar_iana_id == "100"

    def test_non_string_fn_is_absent(self) -> None:
        entity = registrar_entity()
        entity["vcardArray"][1][1] = ["fn", {}, "text", ["Part", "Name"]]
        assert extract_registrar_name(entity) is None

    def test_first_registrar_without_vcard_does_not_fall_through(self) -> None:
        first = {"roles": ["registrar"]}
        raw = {"entities": [first, registrar_entity(name="Second Registrar")]}
        assert normalize(raw).registrar_name is None

    def test_other_public_id_types_ignored(self) -> None:
        entity = registrar_entity()
        entity["publicIds"] = [{"type": "Registry ID", "identifier": "X"}]
        assert normalize({"entities": [entity]}).registrar_iana_id is None

    def test_numeric_identifier_becomes_string(self) -> None:
        entity = registrar_entity(iana_id=292)
        assert normalize({"entities": [entity]}).registrar_iana_id == "292"


class TestEventSlotProperty:
    """Event actions map to slots by exact match; the last duplicate wins."""

    @given(first=timestamp_strategy(), second=timestamp_strategy())
    @settings(max_examples=100)
    def test_second_expiration_wins(self, first: datetime, second: datetime) -> None:
        raw = {"events": [
            {"eventAction": "expiration", "eventDate": iso(first)},
            {"eventAction": "expiration", "eventDate": iso(second)},
        ]}
        assert normalize(raw).expiration_date == format_rdap_date(iso(second))

    @given(action=st.text(max_size=30).filter(lambda a: a not in {
        "registration", "expiration", "last changed", "last update of RDAP database",
    }))
    @settings(max_examples=100)
    def test_unknown_actions_ignored(self, action: str) -> None:
        raw = {"events": [{"eventAction": action, "eventDate": "2024-01-05T00:00:00Z"}]}
        result = normalize(raw)
        assert result.registration_date is None
        assert result.expiration_date is None
        assert result.last_changed_date is None
        assert result.rdap_database_updated_date is None

    def test_action_match_is_case_sensitive(self) -> None:
        raw = {"events": [{"eventAction": "Registration", "eventDate": "2024-01-05T00:00:00Z"}]}
        assert normalize(raw).registration_date is None

    def test_invalid_date_marker_and_warning(self) -> None:
        raw = {"events": [{"eventAction": "registration", "eventDate": "yesterday"}]}
        result = normalize(raw)
        assert result.registration_date == INVALID_DATE
        assert len(result.warnings) == 1
        assert "registration" in result.warnings[0]


class TestDateFormattingProperty:
    """Long-form UTC dates."""

    @given(dt=timestamp_strategy())
    @settings(max_examples=100)
    def test_format_matches_calendar_date(self, dt: datetime) -> None:
        expected = f"{dt.strftime('%B')} {dt.day}, {dt.year}"
        assert format_rdap_date(iso(dt)) == expected

    def test_examples(self) -> None:
        assert format_rdap_date("2024-01-05T00:00:00Z") == "January 5, 2024"
        assert format_rdap_date("2024-01-05T00:00:00.123Z") == "January 5, 2024"
        assert format_rdap_date("2024-01-05") == "January 5, 2024"

    def test_offsets_are_converted_to_utc(self) -> None:
        assert format_rdap_date("2024-01-05T23:30:00-05:00") == "January 6, 2024"

    def test_utc_conversion_out_of_range(self) -> None:
        assert format_rdap_date("9999-12-31T23:00:00-05:00") == INVALID_DATE
        assert format_rdap_date("0001-01-01T00:00:00+05:00") == INVALID_DATE
        assert format_rdap_date("9999-12-31T23:00:00Z") == "December 31, 9999"

    def test_out_of_range_event_becomes_warning(self) -> None:
        raw = {"events": [
            {"eventAction": "registration", "eventDate": "2024-01-05T00:00:00Z"},
            {"eventAction": "expiration", "eventDate": "9999-12-31T23:00:00-05:00"},
        ]}
        result = normalize(raw)
        assert result.registration_date == "January 5, 2024"
        assert result.expiration_date == INVALID_DATE
        assert len(result.warnings) == 1

    @given(value=st.one_of(
        st.none(),
        st.integers(),
        st.text(alphabet=string.ascii_letters + " ", max_size=20),
    ))
    @settings(max_examples=100)
    def test_garbage_yields_invalid_marker(self, value) -> None:
        assert format_rdap_date(value) == INVALID_DATE


class TestPassThroughProperty:
    """Status codes, nameservers and DS records keep their length and order."""

    @given(
        status=st.lists(st.text(alphabet=string.ascii_lowercase + " ", min_size=1, max_size=30), max_size=8),
        names=st.lists(
            st.text(alphabet=string.ascii_lowercase + ".", min_size=1, max_size=20), max_size=8
        ),
        ds=st.lists(
            st.fixed_dictionaries({
                "keyTag": st.integers(min_value=0, max_value=65535),
                "algorithm": st.integers(min_value=0, max_value=255),
                "digestType": st.integers(min_value=0, max_value=255),
                "digest": st.text(alphabet="0123456789abcdefABCDEF", min_size=1, max_size=64),
            }),
            max_size=4,
        ),
    )
    @settings(max_examples=100)
    def test_order_and_length_preserved(self, status, names, ds) -> None:
        raw = {
            "status": status,
            "nameservers": [{"ldhName": n} for n in names],
            "secureDNS": {"delegationSigned": bool(ds), "dsData": ds},
        }
        result = normalize(raw)

        assert list(result.status_codes) == status
        assert [ns.name for ns in result.nameservers] == names
        assert [dict(r) for r in result.dnssec.ds_records] == ds
        assert result.dnssec.signed == bool(ds)
