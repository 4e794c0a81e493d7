# ./tests/tests_unit/test_generator/test_generator_synthesizer.py


###### IMPORT TOOLS ######
# global imports
import json
import random
from collections import Counter
from datetime import datetime, timezone
import pytest

# local imports
from src.errors import ConfigurationError
from src.generator.catalog import EVENT_TYPES, OPERATING_SYSTEMS, UNKNOWN_OS
from src.generator.data_generator import DataGenerator
from src.generator.payloads import payload_schema
from src.generator.synthesizer import EventSynthesizer


###### TESTS ######
@pytest.mark.parametrize("seed", [1, 2, 3, 17])
def test_events_copy_session_context(config_factory, seed):
    '''Device, browser, geography and user come from the selected session.'''
    generator = DataGenerator.from_config(config_factory(seed=seed, unique_users=50))
    sessions = {s.id: s for s in generator.sessions}
    user_ids = {u.id for u in generator.users}
    for event in generator.generate_batch(500):
        session = sessions[event.session_id]
        assert event.user_id == session.user_id
        assert event.user_id in user_ids
        assert event.device_type == session.device_type
        assert event.browser == session.browser
        assert event.country_code == session.country_code
        assert event.city == session.city


def test_generate_batch_returns_exact_count(small_generator):
    assert len(small_generator.generate_batch(0)) == 0
    assert len(small_generator.generate_batch(1)) == 1
    assert len(small_generator.generate_batch(257)) == 257


def test_stream_is_lazy_and_restartable(small_generator):
    synthesizer = small_generator.synthesizer
    first = synthesizer.stream()
    second = synthesizer.stream()
    assert first is not second
    taken = [next(first) for _ in range(5)] + [next(second) for _ in range(5)]
    assert len(taken) == 10


def test_generation_does_not_touch_arenas(small_generator):
    users_before = small_generator.users
    sessions_before = small_generator.sessions
    small_generator.generate_batch(300)
    assert small_generator.users is users_before
    assert small_generator.sessions is sessions_before


def test_payload_documents_match_their_schema(small_generator):
    '''After a JSON round-trip every payload validates against its event type schema.'''
    seen = set()
    for event in small_generator.generate_batch(3000):
        document = json.loads(json.dumps(event.properties))
        payload_schema(event.event_type).model_validate(document)
        seen.add(event.event_type)
        if event.event_type == "click":
            assert set(document) == {"button_id", "value"}
        if event.event_type == "page_view":
            assert document == {}
    assert seen == {t for t, _ in EVENT_TYPES}


def test_event_type_distribution(small_generator):
    counts = Counter(e.event_type for e in small_generator.generate_batch(10_000))
    assert counts["page_view"] / 10_000 == pytest.approx(0.60, abs=0.03)
    assert counts["click"] / 10_000 == pytest.approx(0.25, abs=0.03)


def test_operating_system_follows_device(small_generator):
    for event in small_generator.generate_batch(1000):
        allowed = {name for name, _ in OPERATING_SYSTEMS[event.device_type]}
        assert event.os in allowed
    assert small_generator.synthesizer.operating_system("smartwatch") == UNKNOWN_OS


def test_referrer_drop_probability(config_factory):
    always = DataGenerator.from_config(config_factory(referrer_drop_probability=1.0))
    never = DataGenerator.from_config(config_factory(referrer_drop_probability=0.0))
    assert all(e.referrer is None for e in always.generate_batch(200))
    assert all(e.referrer in never.synthesizer.pools.referrers for e in never.generate_batch(200))


def test_default_referrer_share(small_generator):
    events = small_generator.generate_batch(5000)
    direct = sum(1 for e in events if e.referrer is None) / len(events)
    assert direct == pytest.approx(0.30, abs=0.04)


def test_page_urls_come_from_pool(small_generator):
    pool = set(small_generator.synthesizer.pools.page_urls)
    assert all(e.page_url in pool for e in small_generator.generate_batch(200))


def test_business_hours_bias(config_factory):
    '''Traffic inside 09-17 is well above its 9/24 share of the clock.'''
    generator = DataGenerator.from_config(config_factory(seed=11))
    events = generator.generate_batch(3000)
    share = sum(1 for e in events if 9 <= e.event_time.hour <= 17) / len(events)
    assert share > 0.55


def test_business_hours_in_configured_timezone(config_factory):
    generator = DataGenerator.from_config(config_factory(timezone="Asia/Tokyo"))
    synthesizer = generator.synthesizer
    # 01:00 UTC is 10:00 in Tokyo
    assert synthesizer.is_business_hour(datetime(2025, 8, 2, 1, 0, tzinfo=timezone.utc))
    assert not synthesizer.is_business_hour(datetime(2025, 8, 2, 12, 0, tzinfo=timezone.utc))


def test_resample_loop_is_capped_and_falls_back(config_factory):
    '''A window with no business hours exhausts the cap and keeps the candidate.'''
    config = config_factory(
        start_date=datetime(2025, 8, 1, 1, 0, tzinfo=timezone.utc),
        end_date=datetime(2025, 8, 1, 2, 0, tzinfo=timezone.utc),
        off_hours_keep_probability=1e-12,
        max_resamples=10,
        unique_users=20,
    )
    generator = DataGenerator.from_config(config)
    events = generator.generate_batch(50)
    assert len(events) == 50
    assert generator.synthesizer.fallback_count == 50
    assert all(e.event_time.hour in (1, 2) for e in events)


def test_resample_cap_zero_accepts_first_candidate(small_generator, config_factory):
    config = config_factory(max_resamples=0, off_hours_keep_probability=1e-12)
    synthesizer = EventSynthesizer(small_generator.sessions, config, random.Random(1), small_generator.synthesizer.pools)
    session = small_generator.sessions[0]
    moment = synthesizer.event_time(session)
    assert session.started_at <= moment <= session.started_at + synthesizer.window


def test_same_seed_same_events(config_factory):
    first = DataGenerator.from_config(config_factory(seed=99))
    second = DataGenerator.from_config(config_factory(seed=99))
    a, b = first.generate_batch(100), second.generate_batch(100)
    assert [e.session_id for e in a] == [e.session_id for e in b]
    assert [e.event_time for e in a] == [e.event_time for e in b]
    assert [e.properties for e in a] == [e.properties for e in b]


def test_empty_session_pool_raises(config_factory):
    with pytest.raises(ConfigurationError):
        EventSynthesizer((), config_factory(), random.Random(0))
