import json
import tempfile
import unittest
from pathlib import Path

from mintgate.tests.fakes import make_wallets
from mintgate.wallets import generate_wallets, load_wallets, save_wallets


class WalletStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_missing_file_is_empty(self) -> None:
        self.assertEqual(load_wallets(self.dir / "nope.json"), [])

    def test_malformed_file_is_empty(self) -> None:
        bad = self.dir / "bad.json"
        bad.write_text("{not json", encoding="utf-8")
        self.assertEqual(load_wallets(bad), [])
        bad.write_text(json.dumps({"wallets": {"a": 1}}), encoding="utf-8")
        self.assertEqual(load_wallets(bad), [])
        bad.write_text(json.dumps([1, 2]), encoding="utf-8")
        self.assertEqual(load_wallets(bad), [])

    def test_save_then_load_keeps_order(self) -> None:
        path = self.dir / "wallets.json"
        wallets = make_wallets(3)
        save_wallets(path, wallets)
        self.assertEqual(load_wallets(path), wallets)
        on_disk = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual(set(on_disk["wallets"][0]), {"address", "privateKey"})

    def test_bad_entries_dropped(self) -> None:
        good = make_wallets(1)[0]
        path = self.dir / "wallets.json"
        path.write_text(json.dumps({"wallets": [
            {"address": "0xabc"},
            {"address": good.address, "privateKey": "0xzz"},
            {"address": good.address, "privateKey": good.private_key},
        ]}), encoding="utf-8")
        self.assertEqual(load_wallets(path), [good])

    def test_ronin_prefix_and_address_from_key(self) -> None:
        good = make_wallets(1)[0]
        path = self.dir / "wallets.json"
        path.write_text(json.dumps({"wallets": [
            {"address": "ronin:" + good.address[2:], "privateKey": "ronin:" + good.private_key[2:]},
        ]}), encoding="utf-8")
        (loaded,) = load_wallets(path)
        self.assertEqual(loaded.address, good.address)
        self.assertEqual(loaded.private_key, good.private_key)

    def test_key_not_in_repr(self) -> None:
        w = make_wallets(1)[0]
        self.assertNotIn(w.private_key[2:], repr(w))

    def test_generate(self) -> None:
        wallets = generate_wallets(2)
        self.assertEqual(len(wallets), 2)
        self.assertNotEqual(wallets[0].address, wallets[1].address)
        path = self.dir / "gen.json"
        save_wallets(path, wallets)
        self.assertEqual(load_wallets(path), wallets)


if __name__ == "__main__":
    unittest.main()
