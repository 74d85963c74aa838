import pytest

from devhosts.drivers import (
    BasicDriver,
    IndexFallback,
    MoodleDriver,
    PassThrough,
    StaticBoundary,
    find_driver,
)


@pytest.fixture()
def moodle_site(tmp_path):
    site = tmp_path / "moodle"
    site.mkdir()
    (site / "config-dist.php").write_text("<?php")
    (site / "course").mkdir()
    (site / "grade").mkdir()
    (site / "index.php").write_text("<?php")
    return site


@pytest.fixture()
def driver():
    return MoodleDriver()


class TestClassify:
    def test_sub_path_through_bridge_is_a_static_boundary(self, driver):
        decision = driver.classify("/lib/javascript.php/1700000000/lib/module.js")
        assert decision == StaticBoundary(prefix="/lib/javascript.php", rest="/1700000000/lib/module.js")
        assert driver.mutate_uri("/javascript.php/module.js") == "/module.js"

    def test_bridge_without_suffix_is_not_a_boundary(self, driver):
        assert driver.classify("/javascript.php") == PassThrough("/javascript.php")

    def test_bridge_match_is_case_insensitive(self, driver):
        assert driver.classify("/theme/STYLES.PHP/boost/all") == StaticBoundary(
            prefix="/theme/STYLES.PHP", rest="/boost/all"
        )

    def test_first_bridge_in_priority_order_wins(self, driver):
        decision = driver.classify("/theme/image.php/styles.php/x")
        assert decision.prefix == "/theme/image.php/styles.php"
        assert decision.rest == "/x"

    def test_bridge_at_end_does_not_hide_a_later_bridge(self, driver):
        decision = driver.classify("/pluginfile.php/1/mod/styles.php")
        assert decision == StaticBoundary(prefix="/pluginfile.php", rest="/1/mod/styles.php")

    @pytest.mark.parametrize("uri,expected", [
        ("", "/index.php"),
        ("/about", "/about/index.php"),
        ("/course/view", "/course/view/index.php"),
        ("/scripts/app.json", "/scripts/app.json/index.php"),
    ])
    def test_index_fallback(self, driver, uri, expected):
        assert driver.classify(uri) == IndexFallback(expected)

    @pytest.mark.parametrize("uri", [
        "/style.css",
        "/lib/app.js",
        "/login/index.php",
        "/pix/logo.png",
        "/pix/photo.JPEG",
        "/help.html",
    ])
    def test_pass_through(self, driver, uri):
        assert driver.classify(uri) == PassThrough(uri)

    def test_extension_match_is_not_anchored(self, driver):
        # .php anywhere in the path counts, .js and .css only at the end
        assert driver.classify("/file.php/extra") == PassThrough("/file.php/extra")
        assert driver.classify("/lib.js/extra") == IndexFallback("/lib.js/extra/index.php")


class TestFrontController:
    def test_static_boundary_runs_the_bridge(self, driver, moodle_site):
        controller = driver.route(moodle_site, "moodle", "/lib/javascript.php/1/lib/module.js")
        assert controller.script == f"{moodle_site}/lib/javascript.php"
        assert controller.path_info == "/1/lib/module.js"
        assert controller.server["PATH_INFO"] == "/1/lib/module.js"

    def test_php_uri_is_used_literally(self, driver, moodle_site):
        controller = driver.route(moodle_site, "moodle", "/login/index.php")
        assert controller.script == f"{moodle_site}/login/index.php"
        assert controller.path_info is None
        assert controller.server["SERVER_SOFTWARE"] == "PHP"
        assert controller.server["PHP_SELF"] == "/login/index.php"

    def test_directory_resolves_to_its_index(self, driver, moodle_site):
        assert driver.route(moodle_site, "moodle", "").script == f"{moodle_site}/index.php"
        assert driver.route(moodle_site, "moodle", "/course").script == f"{moodle_site}/course/index.php"

    def test_existing_static_file_is_served_directly(self, driver, moodle_site):
        (moodle_site / "style.css").write_text("body {}")
        assert driver.route(moodle_site, "moodle", "/style.css").script == f"{moodle_site}/style.css"

    def test_missing_static_file_falls_back_to_index(self, driver, moodle_site):
        assert driver.route(moodle_site, "moodle", "/missing.css").script == f"{moodle_site}/missing.css/index.php"


class TestBasicDriver:
    def test_actual_file(self, tmp_path):
        (tmp_path / "info.php").write_text("<?php")
        assert BasicDriver().route(tmp_path, "site", "/info.php").script == f"{tmp_path}/info.php"

    def test_public_index(self, tmp_path):
        (tmp_path / "public").mkdir()
        (tmp_path / "public" / "index.php").write_text("<?php")
        assert BasicDriver().route(tmp_path, "site", "/users").script == f"{tmp_path}/public/users/index.php"

    def test_html_index(self, tmp_path):
        (tmp_path / "docs").mkdir()
        (tmp_path / "docs" / "index.html").write_text("")
        assert BasicDriver().route(tmp_path, "site", "/docs").script == f"{tmp_path}/docs/index.html"


def test_find_driver(moodle_site, tmp_path):
    assert isinstance(find_driver(moodle_site, "moodle", "/"), MoodleDriver)
    plain = tmp_path / "plain"
    plain.mkdir()
    assert isinstance(find_driver(plain, "plain", "/"), BasicDriver)
    assert not isinstance(find_driver(plain, "plain", "/"), MoodleDriver)
