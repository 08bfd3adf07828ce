from pathlib import Path

from flyby.common import paths


def test_defaults_when_environment_unset():
    search_paths = paths.resolve_db_paths(env={})

    assert search_paths.primary == paths.DEFAULT_DATA_HOME / "flyby" / "flyby.db"
    assert search_paths.shared == (
        Path("/usr/local/share/flyby/flyby.db"),
        Path("/usr/share/flyby/flyby.db"),
    )


def test_empty_values_fall_back_to_defaults():
    env = {"XDG_DATA_HOME": "", "XDG_DATA_DIRS": "  ", "XDG_CONFIG_HOME": ""}

    assert paths.data_home(env) == paths.DEFAULT_DATA_HOME
    assert paths.data_dirs(env) == [Path("/usr/local/share/"), Path("/usr/share/")]
    assert paths.config_home(env) == paths.DEFAULT_CONFIG_HOME


def test_environment_order_is_kept():
    env = {"XDG_DATA_HOME": "/home/op/data", "XDG_DATA_DIRS": "/opt/a::/opt/b:"}
    search_paths = paths.resolve_db_paths(env=env)

    assert search_paths.primary == Path("/home/op/data/flyby/flyby.db")
    assert search_paths.shared == (Path("/opt/a/flyby/flyby.db"), Path("/opt/b/flyby/flyby.db"))


def test_application_order_puts_primary_last():
    search_paths = paths.SearchPaths(primary=Path("/p.db"), shared=(Path("/high.db"), Path("/low.db")))

    assert search_paths.application_order() == [
        (False, Path("/low.db")),
        (False, Path("/high.db")),
        (True, Path("/p.db")),
    ]


def test_custom_filename():
    search_paths = paths.resolve_db_paths(env={"XDG_DATA_HOME": "/d", "XDG_DATA_DIRS": "/s"},
                                          filename="test.db")

    assert search_paths.primary == Path("/d/flyby/test.db")
    assert search_paths.shared == (Path("/s/flyby/test.db"),)
