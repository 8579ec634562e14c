import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
SRC_DIR = TESTS_DIR.parent / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from tvcatalog.m3u.parser import (
    UNNAMED_CHANNEL,
    name_from_url,
    parse_attributes,
    parse_extinf,
    parse_playlist,
)
from tvcatalog.models import DEFAULT_CATEGORY, Protocol, Quality, SourceOrigin, make_channel_id


EXAMPLE = (
    "#EXTM3U\n"
    "央视,#genre#\n"
    '#EXTINF:-1 tvg-id="CCTV1" group-title="央视",CCTV-1\n'
    "http://a/1\n"
    '#EXTINF:-1 group-title="央视",CCTV-1\n'
    "http://a/2\n"
)


class ExtendedDialectTests(unittest.TestCase):
    def test_repeated_name_merges_into_one_channel(self):
        channels = parse_playlist(EXAMPLE)
        self.assertEqual(len(channels), 1)
        ch = channels[0]
        self.assertEqual(ch.name, "CCTV-1")
        self.assertEqual(ch.category, "央视")
        self.assertEqual([s.url for s in ch.sources], ["http://a/1", "http://a/2"])
        self.assertEqual(ch.epg_id, "CCTV1")
        self.assertEqual(ch.display_name, "CCTV-1")
        self.assertEqual(ch.id, make_channel_id("央视", "CCTV-1"))

    def test_merge_keeps_every_source(self):
        pairs = "".join(f"#EXTINF:-1,Same\nhttp://host/{i}\n" for i in range(5))
        channels = parse_playlist("#EXTM3U\n" + pairs)
        self.assertEqual(len(channels), 1)
        self.assertEqual(len(channels[0].sources), 5)

    def test_header_without_genre_uses_extended_path(self):
        text = '#EXTM3U\n#EXTINF:-1 tvg-name="Nice Name" tvg-logo="http://l/x.png",Raw\nhttp://x/stream\n'
        channels = parse_playlist(text)
        self.assertEqual(len(channels), 1)
        ch = channels[0]
        self.assertEqual(ch.name, "Raw")
        self.assertEqual(ch.display_name, "Nice Name")
        self.assertEqual(ch.logo, "http://l/x.png")
        self.assertEqual(ch.category, DEFAULT_CATEGORY)

    def test_first_info_record_wins_for_metadata(self):
        text = (
            "#EXTM3U\n"
            '#EXTINF:-1 tvg-logo="first.png" group-title="A",Chan\nhttp://1\n'
            '#EXTINF:-1 tvg-logo="second.png" group-title="B",Chan\nhttp://2\n'
        )
        ch = parse_playlist(text)[0]
        self.assertEqual(ch.logo, "first.png")
        self.assertEqual(ch.category, "A")
        self.assertEqual(len(ch.sources), 2)

    def test_info_without_url_is_dropped(self):
        text = (
            "#EXTM3U\n"
            "#EXTINF:-1,Orphan\n"
            "#EXTINF:-1,Kept\n"
            "http://kept\n"
            "#EXTINF:-1,Orphan Before Genre\n"
            "Other,#genre#\n"
            "http://nobody\n"
        )
        names = [ch.name for ch in parse_playlist(text)]
        self.assertEqual(names, ["Kept"])

    def test_url_without_pending_info_is_ignored(self):
        self.assertEqual(parse_playlist("#EXTM3U\nhttp://lonely\n"), [])

    def test_genre_marker_sets_default_category(self):
        text = "#EXTM3U\nSports,#genre#\n#EXTINF:-1,Ball\nhttp://ball\n"
        self.assertEqual(parse_playlist(text)[0].category, "Sports")

    def test_name_comes_from_last_comma(self):
        info = parse_extinf('#EXTINF:-1 tvg-name="a,b" group-title="G",Real Name')
        self.assertEqual(info.name, "Real Name")
        self.assertEqual(info.tvg_name, "a,b")
        self.assertEqual(info.category, "G")

    def test_blank_lines_and_comments_are_skipped(self):
        text = "\n\n#EXTM3U\n\n#EXTINF:-1,One\n\n#EXTVLCOPT:http-user-agent=x\nhttp://one\n\n"
        channels = parse_playlist(text)
        self.assertEqual([s.url for s in channels[0].sources], ["http://one"])

    def test_leading_bom_keeps_extended_dialect(self):
        text = "\ufeff#EXTM3U\n央视,#genre#\n#EXTINF:-1 group-title=\"央视\",CCTV-1\nhttp://a/1\n"
        channels = parse_playlist(text)
        self.assertEqual([(ch.name, ch.category) for ch in channels], [("CCTV-1", "央视")])

    def test_bom_inside_joined_bodies_is_ignored(self):
        text = EXAMPLE + "\n\n\ufeff#EXTM3U\n#EXTINF:-1 group-title=\"央视\",CCTV-1\nhttp://a/3\n"
        channels = parse_playlist(text)
        self.assertEqual(len(channels), 1)
        self.assertEqual([s.url for s in channels[0].sources], ["http://a/1", "http://a/2", "http://a/3"])

    def test_extra_attributes_are_kept_as_metadata(self):
        text = '#EXTM3U\n#EXTINF:-1 tvg-chno="7" tvg-id="X" catchup="default",Seven\nhttp://s/7\n'
        ch = parse_playlist(text)[0]
        self.assertEqual(ch.metadata["tvg-chno"], "7")
        self.assertEqual(ch.metadata["catchup"], "default")
        self.assertEqual(ch.metadata["tvg-id"], "X")

    def test_simple_dialect_has_no_metadata(self):
        self.assertEqual(parse_playlist("A,http://a\n")[0].metadata, {})

    def test_first_seen_order(self):
        text = "#EXTM3U\n#EXTINF:-1,B\nhttp://b\n#EXTINF:-1,A\nhttp://a\n#EXTINF:-1,B\nhttp://b2\n"
        self.assertEqual([ch.name for ch in parse_playlist(text)], ["B", "A"])


class SimpleDialectTests(unittest.TestCase):
    def test_name_url_lines(self):
        text = "News,#genre#\nOne,http://h/1\nOne,rtmp://h/2\nTwo,rtsp://h/3\n"
        channels = parse_playlist(text)
        self.assertEqual([ch.name for ch in channels], ["One", "Two"])
        self.assertEqual(len(channels[0].sources), 2)
        self.assertEqual(channels[0].category, "News")
        self.assertEqual(channels[0].sources[1].protocol, Protocol.RTMP)

    def test_splits_on_first_comma_only(self):
        ch = parse_playlist("Name,http://h/a,b\n")[0]
        self.assertEqual(ch.sources[0].url, "http://h/a,b")

    def test_bare_url_gets_name_from_path(self):
        ch = parse_playlist("http://h/live/channel7.m3u8\n")[0]
        self.assertEqual(ch.name, "channel7")

    def test_categories_follow_genre_markers(self):
        text = "A,#genre#\nx,http://1\nB,#genre#\ny,http://2\n"
        self.assertEqual([ch.category for ch in parse_playlist(text)], ["A", "B"])

    def test_extinf_without_header_is_not_extended(self):
        text = "#EXTINF:-1,Ignored\nhttp://h/stream.ts\n"
        channels = parse_playlist(text)
        self.assertEqual([ch.name for ch in channels], ["stream"])


class HelperTests(unittest.TestCase):
    def test_attributes_are_order_independent(self):
        attrs = parse_attributes('#EXTINF:-1 group-title="G" tvg-id="X",N')
        self.assertEqual(attrs, {"group-title": "G", "tvg-id": "X"})

    def test_name_from_url_placeholder(self):
        self.assertEqual(name_from_url("http://host"), UNNAMED_CHANNEL)

    def test_garbage_never_raises(self):
        self.assertEqual(parse_playlist(""), [])
        self.assertEqual(parse_playlist(None), [])
        self.assertEqual(parse_playlist("just some words\n,,,\n"), [])

    def test_source_fields_are_derived(self):
        ch = parse_playlist("#EXTM3U\n#EXTINF:-1,Q\nhttps://h/uhd/stream\n")[0]
        source = ch.sources[0]
        self.assertEqual(source.protocol, Protocol.HTTPS)
        self.assertEqual(source.quality, Quality.UHD)
        self.assertEqual(source.origin, SourceOrigin.REMOTE)
        self.assertEqual(source.priority, 0)

    def test_progress_callback(self):
        messages = []
        parse_playlist(EXAMPLE, progress_callback=messages.append)
        self.assertEqual(messages[-1], "Parsed 1 channels")


if __name__ == "__main__":
    unittest.main()
