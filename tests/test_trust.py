from pathlib import Path

from devhosts.trust import TrustStore, default_databases


class TestInstall:
    def test_adds_label_to_every_database(self, trust, cli):
        assert trust.install("blog.test", Path("/certs/blog.test.crt")) == []
        assert cli.named("certutil") == [
            ["certutil", "-d", "sql:/nssdb", "-A", "-t", "TC", "-n", "blog.test", "-i", "/certs/blog.test.crt"],
            ["certutil", "-d", "/firefox/abc.default", "-A", "-t", "TC", "-n", "blog.test", "-i", "/certs/blog.test.crt"],
        ]

    def test_failing_database_does_not_stop_the_others(self, trust, cli):
        cli.fail_when = lambda args: "sql:/nssdb" in args
        failed = trust.install("blog.test", Path("/certs/blog.test.crt"))
        assert failed == ["sql:/nssdb"]
        assert len(cli.named("certutil")) == 2


class TestRemove:
    def test_absent_label_is_not_an_error(self, trust, cli):
        cli.fail_when = lambda args: True
        trust.remove("blog.test")
        assert [args[-3:] for args in cli.named("certutil")] == [["-D", "-n", "blog.test"]] * 2


def test_default_databases_include_firefox_profiles(tmp_path, monkeypatch):
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
    (tmp_path / ".mozilla" / "firefox" / "x1y2.default-release").mkdir(parents=True)
    assert default_databases() == [
        f"sql:{tmp_path / '.pki' / 'nssdb'}",
        str(tmp_path / ".mozilla" / "firefox" / "x1y2.default-release"),
    ]


def test_explicit_empty_database_list(cli):
    trust = TrustStore(cli, databases=[])
    assert trust.install("blog.test", Path("/certs/blog.test.crt")) == []
    assert cli.commands == []
