import os
import os.path
import subprocess
import tempfile
import unittest
from unittest.mock import Mock, patch

from redis import ConnectionError as RedisConnectionError

from devstack.plumbing import redis as plumbing
from devstack.plumbing.common import CommandFailed, ExecutionError, Password, State, Unreachable
from devstack.tasks import redis

from .utils import make_config


def _done() -> "subprocess.CompletedProcess[bytes]":
    return subprocess.CompletedProcess([], 0, b"", b"")


def _plain(args):
    return [str(arg) for arg in args]


class RedisTestCase(unittest.TestCase):

    def setUp(self):
        self.tempdir = tempfile.TemporaryDirectory()
        self.config = make_config(self.tempdir.name, redis_port="6380", redis_password="")
        patcher = patch("{}.command".format(plumbing.__spec__.name))
        self.command = patcher.start()
        self.command.return_value = _done()
        self.addCleanup(patcher.stop)
        patcher = patch.object(plumbing, "get_reachable", return_value=False)
        self.reachable = patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        self.tempdir.cleanup()


class TestStart(RedisTestCase):

    def test_start(self):
        result = redis.start(self.config)
        path = os.path.realpath(self.config.redis_dir)
        self.assertTrue(os.path.isdir(path))
        self.assertEqual(result.state, State.created)
        self.assertEqual(result.value, path)
        self.command.assert_called_once()
        args, kwargs = self.command.call_args
        self.assertEqual(_plain(args[0]), ["redis-server", "--port", "6380",
                                           "--daemonize", "yes",
                                           "--logfile", os.path.join(path, "redis.log"),
                                           "--pidfile", os.path.join(path, "redis.pid"),
                                           "--dir", path])
        self.assertEqual(kwargs, {"output": True})

    def test_start_existing_dir(self):
        os.makedirs(self.config.redis_dir)
        result = redis.start(self.config)
        self.assertEqual(result.state, State.success)
        self.command.assert_called_once()

    def test_start_password(self):
        config = make_config(self.tempdir.name, redis_password="secret")
        redis.start(config)
        args = self.command.call_args[0][0]
        self.assertEqual(_plain(args[-2:]), ["--requirepass", "secret"])
        self.assertIsInstance(args[-1], Password)

    def test_start_running(self):
        self.reachable.return_value = True
        result = redis.start(self.config)
        self.command.assert_not_called()
        create_dir, *launch = result.parts
        self.assertEqual(create_dir.state, State.created)
        self.assertEqual(launch, [])

    def test_start_failed(self):
        self.command.side_effect = CommandFailed("redis-server", 1, b"",
                                                 b"Can't chdir to 'x': Permission denied\n")
        with self.assertRaises(CommandFailed) as ctx:
            redis.start(self.config)
        self.assertIn("stderr: Can't chdir to 'x': Permission denied", str(ctx.exception))

    def test_start_execution_error(self):
        self.command.side_effect = ExecutionError("redis-server",
                                                  PermissionError(13, "Permission denied"))
        with self.assertRaises(ExecutionError):
            redis.start(self.config)


class TestStop(RedisTestCase):

    def test_stop_not_running(self):
        result = redis.stop(self.config)
        self.assertEqual(result.state, State.unchanged)
        self.command.assert_not_called()

    def test_stop(self):
        self.reachable.return_value = True
        result = redis.stop(self.config)
        self.assertEqual(result.state, State.success)
        self.command.assert_called_once_with(["redis-cli", "-h", "localhost", "-p", "6380",
                                              "shutdown", "nosave"], output=True)

    def test_stop_password(self):
        config = make_config(self.tempdir.name, redis_password="secret")
        self.reachable.return_value = True
        redis.stop(config)
        args = self.command.call_args[0][0]
        self.assertEqual(_plain(args), ["redis-cli", "-h", "localhost", "-p", config.redis_port,
                                        "-a", "secret", "--no-auth-warning",
                                        "shutdown", "nosave"])

    @patch("{}.LOG".format(plumbing.__spec__.name))
    def test_stop_client_error_server_down(self, log: Mock):
        self.reachable.side_effect = [True, False]
        self.command.side_effect = CommandFailed("redis-cli", 1)
        result = redis.stop(self.config)
        self.assertEqual(result.state, State.success)
        log.warning.assert_called_once_with("redis-cli reported failure, but server is down")

    def test_stop_client_error_server_up(self):
        self.reachable.return_value = True
        self.command.side_effect = CommandFailed("redis-cli", 1)
        with self.assertRaises(CommandFailed):
            redis.stop(self.config)

    def test_stop_idempotent(self):
        self.reachable.side_effect = [True, False]
        self.assertTrue(redis.stop(self.config))
        self.assertFalse(redis.stop(self.config))
        self.assertEqual(self.command.call_count, 1)


@patch("{}.Redis".format(plumbing.__spec__.name))
class TestPing(unittest.TestCase):

    def test_client(self, client: Mock):
        config = make_config("/nonexistent", redis_port="6380", redis_password="")
        plumbing.ping(config)
        client.assert_called_once_with(host="localhost", port=6380, password=None,
                                       socket_connect_timeout=plumbing.CONNECT_TIMEOUT,
                                       socket_timeout=plumbing.CONNECT_TIMEOUT)
        client.return_value.ping.assert_called_once_with()
        client.return_value.close.assert_called_once_with()

    def test_client_password(self, client: Mock):
        config = make_config("/nonexistent", redis_port="6380", redis_password="se/cret@:")
        plumbing.ping(config)
        self.assertEqual(client.call_args[1]["password"], "se/cret@:")

    def test_client_ipv6(self, client: Mock):
        config = make_config("/nonexistent", redis_host="::1", redis_port="6380")
        plumbing.ping(config)
        self.assertEqual(client.call_args[1]["host"], "::1")
        self.assertEqual(client.call_args[1]["port"], 6380)

    def test_unreachable(self, client: Mock):
        config = make_config("/nonexistent")
        client.return_value.ping.side_effect = RedisConnectionError("Connection refused")
        with self.assertRaises(Unreachable) as ctx:
            plumbing.ping(config)
        self.assertEqual(str(ctx.exception), "Connection refused")
        client.return_value.close.assert_called_once_with()


class TestReachable(unittest.TestCase):

    def test_reachable(self):
        config = make_config("/nonexistent")
        with patch.object(plumbing, "ping"):
            self.assertTrue(plumbing.get_reachable(config))

    def test_not_reachable(self):
        config = make_config("/nonexistent")
        with patch.object(plumbing, "ping", side_effect=Unreachable("refused")):
            self.assertFalse(plumbing.get_reachable(config))

    def test_ipv6_not_listening(self):
        # Nothing listens on the port, but the host must still be accepted by the client.
        config = make_config("/nonexistent", redis_host="::1")
        self.assertFalse(plumbing.get_reachable(config))


if __name__ == "__main__":
    unittest.main()
