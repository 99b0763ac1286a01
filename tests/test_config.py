import contextlib
import io
import os
import tempfile
import unittest
from unittest import mock

from rawbird import config as config_module
from rawbird.config import Credentials
from rawbird.errors import ConfigurationError

VALID_ENV = {
    "TWITTER_CK": "consumer-key-1234",
    "TWITTER_CS": "consumer-secret",
    "TWITTER_AT": "access-token-5678",
    "TWITTER_ATS": "access-token-secret",
}


class TestLoadCredentials(unittest.TestCase):
    def test_loads_all_four_values(self) -> None:
        credentials = config_module.load_credentials(VALID_ENV)
        self.assertEqual(
            credentials,
            Credentials(
                consumer_key="consumer-key-1234",
                consumer_secret="consumer-secret",
                access_token="access-token-5678",
                access_token_secret="access-token-secret",
            ),
        )

    def test_reads_process_environment_by_default(self) -> None:
        with mock.patch.dict(os.environ, VALID_ENV, clear=True):
            credentials = config_module.load_credentials()
        self.assertEqual(credentials.access_token, "access-token-5678")

    def test_values_are_stripped(self) -> None:
        env = dict(VALID_ENV, TWITTER_CK="  padded  ")
        self.assertEqual(config_module.load_credentials(env).consumer_key, "padded")

    def test_missing_and_blank_values_are_all_reported(self) -> None:
        env = dict(VALID_ENV, TWITTER_CS="   ")
        del env["TWITTER_CK"]

        with self.assertRaises(ConfigurationError) as ctx:
            config_module.load_credentials(env)

        message = str(ctx.exception)
        self.assertIn("TWITTER_CK", message)
        self.assertIn("TWITTER_CS", message)
        self.assertNotIn("TWITTER_ATS", message)

    def test_secrets_are_not_in_repr(self) -> None:
        text = repr(config_module.load_credentials(VALID_ENV))
        self.assertNotIn("consumer-secret", text)
        self.assertNotIn("access-token-secret", text)

    def test_credentials_are_immutable(self) -> None:
        credentials = config_module.load_credentials(VALID_ENV)
        with self.assertRaises(AttributeError):
            credentials.consumer_key = "other"  # type: ignore[misc]


class TestLoadEnvFile(unittest.TestCase):
    def test_loads_explicit_env_file_without_overriding(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, ".env")
            with open(path, "w") as f:
                f.write("TWITTER_CK=from-file\nTWITTER_CS=file-secret\n")

            with mock.patch.dict(os.environ, {"TWITTER_CS": "from-env"}, clear=True):
                loaded = config_module.load_env_file(path)
                self.assertTrue(loaded)
                self.assertEqual(os.environ["TWITTER_CK"], "from-file")
                self.assertEqual(os.environ["TWITTER_CS"], "from-env")

    def test_missing_explicit_env_file_is_configuration_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(ConfigurationError):
                config_module.load_env_file(os.path.join(tmpdir, "missing.env"))

    def test_no_env_file_found_is_not_an_error(self) -> None:
        with mock.patch("rawbird.config.find_dotenv", return_value=""):
            self.assertFalse(config_module.load_env_file())


class TestTimeout(unittest.TestCase):
    def test_parse_timeout(self) -> None:
        self.assertEqual(config_module.parse_timeout("2.5"), 2.5)

    def test_invalid_timeouts(self) -> None:
        for raw in ("abc", "0", "-1"):
            with self.subTest(raw=raw):
                with self.assertRaises(ConfigurationError):
                    config_module.parse_timeout(raw)

    def test_load_timeout_from_environment(self) -> None:
        self.assertEqual(config_module.load_timeout({"RAWBIRD_TIMEOUT": "7"}), 7.0)
        self.assertIsNone(config_module.load_timeout({}))


class TestShowCredentials(unittest.TestCase):
    def test_secrets_are_masked(self) -> None:
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            config_module.show_credentials(config_module.load_credentials(VALID_ENV))

        output = stdout.getvalue()
        self.assertNotIn("consumer-secret", output)
        self.assertNotIn("access-token-secret", output)
        self.assertNotIn("consumer-key-1234", output)
        self.assertIn("1234", output)
        self.assertIn("5678", output)
