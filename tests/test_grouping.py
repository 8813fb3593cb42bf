"""Tests for search result grouping and ranking."""

import json

from vodhub.config.settings import Settings
from vodhub.models.source import SourceCandidate, SourceGroup, VideoSource
from vodhub.search.grouping import (
    arrange_results,
    decode_candidates,
    encode_candidates,
    group_sources,
    latency_rank,
)


def _video(vid, source, title, latency=None):
    return VideoSource(
        video_id=vid,
        source_id=source,
        title=title,
        base_url=f"https://{source}.example.com",
        latency_ms=latency,
    )


class TestGroupSources:
    """Tests for group_sources()."""

    def test_empty_input(self):
        assert group_sources([]) == []

    def test_single_source_is_group_of_one(self):
        groups = group_sources([_video("1", "a", "Show")])
        assert len(groups) == 1
        assert isinstance(groups[0], SourceGroup)
        assert len(groups[0]) == 1
        assert groups[0].representative.source_id == "a"

    def test_groups_by_normalized_title(self):
        videos = [
            _video("1", "a", "The Show"),
            _video("2", "b", "  the show "),
            _video("3", "c", "THE SHOW"),
            _video("4", "d", "Other"),
        ]
        groups = group_sources(videos)
        assert [g.key for g in groups] == ["the show", "other"]
        assert [v.source_id for v in groups[0]] == ["a", "b", "c"]

    def test_sorted_by_latency(self):
        videos = [
            _video("1", "a", "Show", 300),
            _video("2", "b", "Show", 100),
            _video("3", "c", "Show", 200),
        ]
        group = group_sources(videos)[0]
        assert [v.source_id for v in group] == ["b", "c", "a"]
        assert group.representative.source_id == "b"
        assert group.name == "Show"

    def test_unmeasured_sort_last_in_input_order(self):
        videos = [
            _video("1", "a", "Show"),
            _video("2", "b", "Show", 250),
            _video("3", "c", "Show"),
            _video("4", "d", "Show", 50),
        ]
        group = group_sources(videos)[0]
        assert [v.source_id for v in group] == ["d", "b", "a", "c"]

    def test_ties_keep_input_order(self):
        videos = [_video(str(i), s, "Show", 100) for i, s in enumerate("xyz")]
        assert [v.source_id for v in group_sources(videos)[0]] == ["x", "y", "z"]

    def test_membership_independent_of_input_order(self):
        videos = [
            _video("1", "a", "Show", 30),
            _video("2", "b", "Movie"),
            _video("3", "c", "show", 10),
            _video("4", "d", "MOVIE", 5),
        ]
        forward = {g.key: {v.source_id for v in g} for g in group_sources(videos)}
        backward = {g.key: {v.source_id for v in g} for g in group_sources(videos[::-1])}
        assert forward == backward
        assert group_sources(videos) == group_sources(videos)

    def test_latency_map_overrides(self):
        videos = [_video("1", "a", "Show", 10), _video("2", "b", "Show")]
        group = group_sources(videos, {"b": 5.0})[0]
        assert [v.source_id for v in group] == ["b", "a"]
        assert group.representative.latency_ms == 5.0
        # Inputs untouched
        assert videos[1].latency_ms is None

    def test_candidates(self):
        group = group_sources([_video("1", "a", "Show", 10), _video("9", "b", "Show")])[0]
        assert group.candidates() == [
            SourceCandidate(id="1", source="a", latency=10),
            SourceCandidate(id="9", source="b"),
        ]


class TestArrangeResults:
    """Tests for arrange_results()."""

    def test_normal_mode_is_flat(self):
        videos = [_video("1", "a", "Show"), _video("2", "b", "Show")]
        assert arrange_results(videos, Settings()) == videos

    def test_grouped_mode(self):
        videos = [_video("1", "a", "Show"), _video("2", "b", "Show")]
        result = arrange_results(videos, Settings(search_display_mode="grouped"))
        assert len(result) == 1
        assert isinstance(result[0], SourceGroup)


class TestCandidateEncoding:
    """Tests for groupedSources (de)serialization."""

    def test_encode_decode(self):
        candidates = [
            SourceCandidate(id="1", source="a", source_name="Alpha", latency=12.5),
            SourceCandidate(id="2", source="b"),
        ]
        assert decode_candidates(encode_candidates(candidates)) == candidates

    def test_encode_uses_upstream_keys(self):
        raw = encode_candidates([SourceCandidate(id="1", source="a", source_name="Alpha")])
        assert json.loads(raw) == [{"id": "1", "source": "a", "sourceName": "Alpha"}]

    def test_malformed_json(self):
        assert decode_candidates("{not json") == []

    def test_empty_and_none(self):
        assert decode_candidates(None) == []
        assert decode_candidates("") == []

    def test_non_list(self):
        assert decode_candidates('{"id": "1"}') == []

    def test_skips_incomplete_items(self):
        raw = json.dumps([{"id": 1, "source": "a"}, {"id": "2"}, "junk"])
        assert decode_candidates(raw) == [SourceCandidate(id="1", source="a")]


class TestLatencyRank:
    """Tests for latency_rank()."""

    def test_orders_measured_before_unmeasured(self):
        latencies = [None, 30.0, None, 5.0]
        assert sorted(latencies, key=latency_rank) == [5.0, 30.0, None, None]
