import os
import unittest
from unittest.mock import patch

from guideraffle.raffle import InvalidInputError, make_random
from guideraffle.raffle.rng import SEED_ENV_VAR, default_random


class MakeRandomTests(unittest.TestCase):
    def test_explicit_seed_is_reproducible(self):
        self.assertEqual(make_random(5).random(), make_random(5).random())

    def test_env_seed_used_when_no_explicit_seed(self):
        with patch.dict(os.environ, {SEED_ENV_VAR: "77"}):
            first = make_random().random()
            second = make_random().random()
        self.assertEqual(first, second)

    def test_explicit_seed_overrides_env(self):
        with patch.dict(os.environ, {SEED_ENV_VAR: "77"}):
            seeded = make_random(1).random()
        self.assertEqual(seeded, make_random(1).random())

    def test_invalid_env_seed(self):
        with patch.dict(os.environ, {SEED_ENV_VAR: "not-a-number"}):
            with self.assertRaises(InvalidInputError):
                make_random()

    def test_default_random_is_shared(self):
        self.assertIs(default_random(), default_random())

    def test_blank_env_seed_ignored(self):
        with patch.dict(os.environ, {SEED_ENV_VAR: "  "}):
            self.assertIsNotNone(make_random())


if __name__ == "__main__":
    unittest.main()
