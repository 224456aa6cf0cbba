"""Tests for embedded initial-state extraction."""
import json

from insta_latest.models import CaptionStatus
from insta_latest.strategies.embedded import (
    dig,
    extract_from_scripts,
    find_timeline_edges,
    iso_from_unix,
    parse_script_payload,
    post_from_node,
)

NODE = {
    "id": "1",
    "shortcode": "abc",
    "display_url": "http://img",
    "taken_at_timestamp": 0,
    "edge_media_to_caption": {"edges": [{"node": {"text": "hello"}}]},
    "edge_liked_by": {"count": 7},
}

SHARED_DATA = {
    "entry_data": {"ProfilePage": [{"graphql": {"user": {
        "edge_owner_to_timeline_media": {"edges": [{"node": NODE}]},
    }}}]},
}


def _shared_data_script(payload):
    return f"window._sharedData = {json.dumps(payload)};"


def test_shared_data_example():
    post = extract_from_scripts(["var x = 1;", _shared_data_script(SHARED_DATA)])
    d = post.to_dict()
    assert d["id"] == "1"
    assert d["caption"] == "hello"
    assert d["imageUrl"] == "http://img"
    assert d["timestamp"] == "1970-01-01T00:00:00.000Z"
    assert d["likes"] == 7
    assert d["postUrl"].endswith("/p/abc/")
    assert post.caption_status is CaptionStatus.PRESENT


def test_additional_data_loaded_with_user_path():
    payload = {"user": {"edge_owner_to_timeline_media": {"edges": [{"node": NODE}]}}}
    script = f"window.__additionalDataLoaded('/nasa/',{json.dumps(payload)});"
    name, parsed = parse_script_payload(script)
    assert name == "additionalDataLoaded"
    assert find_timeline_edges(parsed)[0]["node"]["id"] == "1"


def test_module_registration_with_data_user_path():
    payload = {"data": {"user": {"edge_owner_to_timeline_media": {"edges": [{"node": NODE}]}}}}
    script = f'__d("InstagramWebSharedData",[],{json.dumps(payload)});'
    post = extract_from_scripts([script])
    assert post.caption == "hello"


def test_malformed_json_block_is_skipped():
    scripts = ["window._sharedData = {not json};", _shared_data_script(SHARED_DATA)]
    post = extract_from_scripts(scripts)
    assert post is not None
    assert post.id == "1"


def test_missing_caption_and_like_fallback():
    node = dict(NODE)
    node.pop("edge_media_to_caption")
    node.pop("edge_liked_by")
    node["edge_media_preview_like"] = {"count": 3}
    post = post_from_node(node)
    assert post.caption == "No caption"
    assert post.caption_status is CaptionStatus.ABSENT
    assert post.like_count == 3


def test_node_without_display_url_is_rejected():
    node = dict(NODE, display_url="")
    assert post_from_node(node) is None
    payload = {"user": {"edge_owner_to_timeline_media": {"edges": [{"node": node}]}}}
    assert extract_from_scripts([f"window._sharedData = {json.dumps(payload)};"]) is None


def test_no_embedded_state():
    assert extract_from_scripts(["console.log('hi')", ""]) is None
    assert parse_script_payload("") is None


def test_dig_and_iso_helpers():
    assert dig({"a": [{"b": 1}]}, ("a", 0, "b")) == 1
    assert dig({"a": []}, ("a", 0, "b")) is None
    assert dig({"a": "str"}, ("a", "b")) is None
    assert iso_from_unix(1_700_000_000) == "2023-11-14T22:13:20.000Z"
    assert iso_from_unix(None) is None
    assert iso_from_unix("garbage") is None
