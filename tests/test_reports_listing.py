from crowdledger.ledger import Ledger
from crowdledger.reports.listing import donor_lines, project_lines


def test_project_and_donor_lines():
    led = Ledger()
    led.create_project("Well", "Build a well", "carol")
    led.donate(1, "0xalice", 10**18)
    led.donate(1, "0xbob", 5 * 10**17)
    led.donate(1, "0xalice", 25 * 10**16)

    assert project_lines(led) == ["1- Well: Build a well (1.75 ETH)"]
    assert donor_lines(led, 1) == ["1- 0xalice : 1.25 ETH", "2- 0xbob : 0.5 ETH"]


def test_donor_lines_empty_project():
    led = Ledger()
    led.create_project("Quiet", "", "carol")
    assert donor_lines(led, 1, decimals=2, unit="USD") == []
