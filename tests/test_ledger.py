import random
import threading

import pytest

from crowdledger.ledger import InvalidAmountError, InvalidInputError, Ledger, NotFoundError


def test_ledger_well_scenario():
    led = Ledger()
    pid = led.create_project("Well", "Build a well", "carol")
    assert pid == 1
    assert led.get_project_count() == 1

    led.donate(1, "alice", 1000)
    assert led.get_donation_amount(1, "alice") == 1000
    assert led.get_donors(1) == ("alice",)

    led.donate(1, "bob", 500)
    assert led.get_donors(1) == ("alice", "bob")

    # Repeat donor accumulates without duplicating or reordering
    led.donate(1, "alice", 250)
    assert led.get_donation_amount(1, "alice") == 1250
    assert led.get_donors(1) == ("alice", "bob")
    assert led.get_total_raised(1) == 1750


def test_project_ids_are_sequential_and_count_matches():
    led = Ledger()
    ids = [led.create_project(f"p{i}", "", "creator") for i in range(5)]
    assert ids == [1, 2, 3, 4, 5]
    assert led.get_project_count() == 5
    p = led.get_project(3)
    assert (p.id, p.title, p.description, p.creator) == (3, "p2", "", "creator")


def test_empty_title_accepted_by_default():
    led = Ledger()
    assert led.create_project("", "", "x") == 1
    assert led.get_project(1).title == ""


def test_strict_titles_rejects_blank_and_leaves_count():
    led = Ledger(strict_titles=True)
    with pytest.raises(InvalidInputError):
        led.create_project("   ", "desc", "x")
    assert led.get_project_count() == 0
    assert led.create_project("Ok", "", "x") == 1


def test_get_project_missing_on_empty_ledger():
    led = Ledger()
    with pytest.raises(NotFoundError) as exc:
        led.get_project(999)
    assert exc.value.project_id == 999


@pytest.mark.parametrize("pid", [0, -1, 2, True])
def test_queries_on_missing_project_raise(pid):
    led = Ledger()
    led.create_project("Only", "", "x")
    with pytest.raises(NotFoundError):
        led.get_donors(pid)
    with pytest.raises(NotFoundError):
        led.get_donation_amount(pid, "alice")
    with pytest.raises(NotFoundError):
        led.get_total_raised(pid)
    with pytest.raises(NotFoundError):
        led.donor_breakdown(pid)


def test_unknown_donor_amount_is_zero():
    led = Ledger()
    led.create_project("Well", "", "x")
    assert led.get_donation_amount(1, "nobody") == 0
    assert led.get_donors(1) == ()


def test_donate_missing_project_leaves_state_unchanged():
    led = Ledger()
    led.create_project("Well", "", "x")
    led.donate(1, "alice", 10)
    before = led.snapshot()
    with pytest.raises(NotFoundError):
        led.donate(2, "alice", 10)
    assert led.snapshot() == before
    assert led.get_project_count() == 1


@pytest.mark.parametrize("amount", [0, -5, 1.5, "10", True, None])
def test_donate_invalid_amount_leaves_state_unchanged(amount):
    led = Ledger()
    led.create_project("Well", "", "x")
    with pytest.raises(InvalidAmountError):
        led.donate(1, "alice", amount)
    assert led.get_donors(1) == ()
    assert led.get_total_raised(1) == 0


def test_invalid_amount_checked_before_project_lookup():
    led = Ledger()
    with pytest.raises(InvalidAmountError):
        led.donate(42, "alice", 0)


def test_donor_sum_matches_total_for_random_sequence():
    rng = random.Random(7)
    led = Ledger()
    for i in range(3):
        led.create_project(f"p{i}", "", "x")
    sent = {1: 0, 2: 0, 3: 0}
    for _ in range(300):
        pid = rng.randint(1, 3)
        amt = rng.randint(1, 10_000)
        led.donate(pid, f"d{rng.randint(0, 9)}", amt)
        sent[pid] += amt
    for pid, expected in sent.items():
        donors = led.get_donors(pid)
        assert len(donors) == len(set(donors))
        assert sum(led.get_donation_amount(pid, d) for d in donors) == expected
        assert led.get_total_raised(pid) == expected


def test_list_projects_and_donor_breakdown():
    led = Ledger()
    led.create_project("Well", "Build a well", "carol")
    led.create_project("School", "Roof", "dave")
    led.donate(1, "alice", 1000)
    led.donate(1, "bob", 500)
    led.donate(1, "alice", 250)

    summaries = led.list_projects()
    assert [s.id for s in summaries] == [1, 2]
    assert (summaries[0].donor_count, summaries[0].total_raised) == (2, 1750)
    assert (summaries[1].donor_count, summaries[1].total_raised) == (0, 0)

    shares = led.donor_breakdown(1)
    assert [(s.position, s.donor, s.amount) for s in shares] == [(1, "alice", 1250), (2, "bob", 500)]


def test_snapshot_is_a_copy():
    led = Ledger()
    led.create_project("Well", "", "x")
    led.donate(1, "alice", 5)
    snap = led.snapshot()
    led.donate(1, "alice", 5)
    led.donate(1, "bob", 1)
    assert snap.donors_of(1) == ("alice",)
    assert snap.donations[0].amount == 5
    assert snap.totals == {1: 5}


def test_publisher_receives_events_after_commit():
    seen = []
    led = Ledger(publisher=seen.append)
    led.create_project("Well", "Build a well", "carol")
    led.donate(1, "alice", 100)
    led.donate(1, "alice", 50)
    assert [e.event_type for e in seen] == ["project_created", "donation_recorded", "donation_recorded"]
    assert seen[1].first_donation is True
    assert seen[2].first_donation is False
    assert (seen[2].donor_amount, seen[2].total_raised) == (150, 150)


def test_failing_publisher_does_not_undo_commit(caplog):
    def boom(_event):
        raise RuntimeError("bus down")

    led = Ledger(publisher=boom)
    assert led.create_project("Well", "", "x") == 1
    led.donate(1, "alice", 7)
    assert led.get_total_raised(1) == 7
    assert "failed to publish" in caplog.text


def test_concurrent_donations_sum_exactly():
    led = Ledger()
    led.create_project("Well", "", "x")

    def worker(n):
        for _ in range(500):
            led.donate(1, f"d{n % 3}", 1)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    donors = led.get_donors(1)
    assert sorted(donors) == ["d0", "d1", "d2"]
    assert sum(led.get_donation_amount(1, d) for d in donors) == 4000
    assert led.get_total_raised(1) == 4000


def test_concurrent_project_creation_has_no_gaps():
    led = Ledger()
    ids = []
    lock = threading.Lock()

    def worker():
        for _ in range(50):
            pid = led.create_project("t", "", "x")
            with lock:
                ids.append(pid)

    threads = [threading.Thread(target=worker) for _ in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert sorted(ids) == list(range(1, 301))
    assert led.get_project_count() == 300


def test_event_sequence_follows_commit_order_under_concurrency():
    seen = []
    led = Ledger(publisher=seen.append)
    led.create_project("Well", "", "x")

    def worker(n):
        for _ in range(200):
            led.donate(1, f"d{n}", 1)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    donations = sorted((e for e in seen if e.event_type == "donation_recorded"), key=lambda e: e.sequence)
    assert [e.sequence for e in donations] == list(range(2, 1202))
    assert [e.total_raised for e in donations] == list(range(1, 1201))


def test_next_sequence_continues_after_commands():
    led = Ledger()
    led.create_project("Well", "", "x")
    led.donate(1, "alice", 1)
    assert led.next_sequence() == 3
