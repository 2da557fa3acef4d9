"""Concurrent redemption attempts: exactly one wins per password."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from threading import Barrier

from backend.records.errors import AlreadyRedeemed


def test_parallel_submissions_of_one_password_succeed_once(service):
    owner = service.owner
    service.activate_teacher(owner, "0xT", "CS01", ["CS101"], [1])
    students = [f"0xS{i}" for i in range(8)]
    for i, identity in enumerate(students):
        service.activate_student(owner, identity, f"R{i}")
    password = service.get_passwords(owner, "CS01", "CS101")[0]
    barrier = Barrier(len(students))

    def attempt(identity: str) -> str:
        barrier.wait()
        try:
            service.submit_review(identity, "CS01", "CS101", 5, "", password)
        except AlreadyRedeemed:
            return "redeemed"
        return "ok"

    with ThreadPoolExecutor(max_workers=len(students)) as pool:
        outcomes = list(pool.map(attempt, students))

    assert outcomes.count("ok") == 1
    assert outcomes.count("redeemed") == len(students) - 1
    assert len(service.get_review(owner, "CS01", "CS101")) == 1


def test_parallel_raw_redeem_succeeds_once(service):
    barrier = Barrier(6)

    def attempt(_: int) -> bool:
        barrier.wait()
        try:
            service.vault.redeem(4242)
        except AlreadyRedeemed:
            return False
        return True

    with ThreadPoolExecutor(max_workers=6) as pool:
        results = list(pool.map(attempt, range(6)))
    assert results.count(True) == 1
