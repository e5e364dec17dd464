# File: tests/test_metadata.py
import pytest

from site_harvest.crawler.metadata import derive_metadata, path_segments
from site_harvest.utils import sanitize_file_name


def test_two_segments():
    meta = derive_metadata("https://a.com/x/y")
    assert (meta.sub_cate_1, meta.sub_cate_2) == ("x", "y")
    assert (meta.sub_cate_3, meta.sub_cate_4, meta.sub_cate_5) == ("", "", "")


def test_idempotent():
    url = "https://a.com/docs/guide/intro"
    assert derive_metadata(url) == derive_metadata(url)


@pytest.mark.parametrize("url", ["https://x.com", "https://x.com/", "http://x.com//"])
def test_root_has_no_categories(url):
    assert derive_metadata(url).categories == ("", "", "", "", "")


def test_only_five_slots_and_empty_segments_dropped():
    meta = derive_metadata("http://a.com/1//2/3/4/5/6/7")
    assert meta.categories == ("1", "2", "3", "4", "5")


def test_total_on_odd_input():
    assert path_segments("not a url") == []
    assert derive_metadata("").categories == ("", "", "", "", "")


def test_to_dict_shape():
    data = derive_metadata("https://a.com/x").to_dict()
    assert data == {
        "metadataAttributes": {
            "url": "https://a.com/x",
            "sub_cate_1": "x",
            "sub_cate_2": "",
            "sub_cate_3": "",
            "sub_cate_4": "",
            "sub_cate_5": "",
        }
    }


@pytest.mark.parametrize(
    "url,stem",
    [
        ("https://x.com", "x_com"),
        ("http://x.com/a-b/c_d?q=1", "x_com_a-b_c_d_q_1"),
        ("ftp://x.com/a", "ftp___x_com_a"),
    ],
)
def test_sanitize_file_name(url, stem):
    assert sanitize_file_name(url) == stem


@pytest.mark.parametrize("url", ["HTTPS://x.com/docs/intro", "Http://x.com/docs/intro"])
def test_upper_case_scheme_still_drops_host(url):
    assert derive_metadata(url).categories[:2] == ("docs", "intro")
    assert sanitize_file_name(url) == "x_com_docs_intro"
