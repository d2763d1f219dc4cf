import logging

import pytest

from etrade_utils.converter import clear_audit_log


SAMPLE_EXPORT = (
    "Account Summary\n"
    "Account,Net Account Value,Total Gain $,Total Gain %\n"
    "Individual Brokerage -1234,12345.67,1000.00,8.81\n"
    "\n"
    "View Summary - All Positions\n"
    "Symbol,Last Price $,Change $,Change %,Quantity,Price Paid $,Day's Gain $,Total Gain $,Total Gain %,Value $\n"
    "AAPL,150.50,1.50,1.01,15,120.00,22.50,457.50,25.42,2257.50\n"
    "01/15/2020,150.50,1.50,1.01,10,100.00,15.00,505.00,50.50,1505.00\n"
    "6/3/2021,150.50,1.50,1.01,5,150.00,7.50,2.50,0.33,752.50\n"
    "MSFT,300.00,-2.00,-0.66,2,250.00,-4.00,100.00,20.00,600.00\n"
    "11/30/2022,300.00,-2.00,-0.66,2,250.00,-4.00,100.00,20.00,600.00\n"
    "CASH,,,,,,,,,2500.00\n"
    "TOTAL,,,,,,,,,7865.00\n"
    "01/16/2020,x,x,x,not,a,number,at,all,!\n"
    "\n"
    "Generated at 10:05 AM ET 10/18/2026\n"
)


@pytest.fixture
def sample_export():
    return SAMPLE_EXPORT


@pytest.fixture(autouse=True)
def _fresh_audit_log(monkeypatch):
    monkeypatch.delenv("AUDIT", raising=False)
    clear_audit_log()
    yield
    clear_audit_log()


@pytest.fixture
def package_logger():
    """The ``etrade_utils`` logger, with its level and handlers restored afterwards."""
    logger = logging.getLogger("etrade_utils")
    level = logger.level
    handlers = list(logger.handlers)
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
