# -*- coding: utf-8 -*-

import threading

import mock
import pytest

import sourcercon.testing


def pytest_configure():
    pytest.Mock = mock.Mock
    pytest.MagicMock = mock.MagicMock


@pytest.fixture
def rcon_server():
    server = sourcercon.testing.TestRCONServer()
    thread = threading.Thread(target=server.serve_forever)
    thread.start()
    yield server
    server.shutdown()
    thread.join()
    server.server_close()
