from __future__ import annotations

import json

from src.cache import Cache
from src.entries import decode
from src.links import identifier_of, parse
from src.pipeline import (
    ScrapeStats,
    collect_cached,
    dedupe_links,
    extract_links,
    fetch_and_cache,
    find_missing,
    resolve_links,
)
from src.sources import read_lines
from src.throttle import Throttle


def make_document(post_id: str, title: str = "a title") -> str:
    return json.dumps(
        [
            {
                "data": {
                    "children": [
                        {
                            "data": {
                                "id": post_id,
                                "title": title,
                                "subreddit": "Metal",
                                "score": 1,
                                "num_comments": 0,
                                "url": f"https://example.com/{post_id}",
                                "permalink": f"/r/Metal/comments/{post_id}/{title.replace(' ', '_')}/",
                            }
                        }
                    ]
                }
            }
        ]
    )


def no_wait() -> Throttle:
    return Throttle(0.0)


def test_extract_links_plain_filters_host_and_garbage():
    lines = [
        "https://www.youtube.com/watch?v=o_3jJG_oGSs",
        "not a link at all",
        "",
        "https://www.reddit.com/r/BlackMetal/comments/5elhkp/spectral_lore_cosmic_significance/",
    ]
    stats = ScrapeStats()

    links = extract_links(lines, "plain", target_host="www.reddit.com", stats=stats)

    assert links == [parse("https://www.reddit.com/r/BlackMetal/comments/5elhkp/spectral_lore_cosmic_significance/")]
    assert stats.lines_read == 4
    assert stats.links_parsed == 2
    assert stats.links_kept == 1


def test_extract_links_from_plain_file(fixtures_dir):
    links = extract_links(read_lines(fixtures_dir / "example_links.txt"), "plain")

    assert links == [
        parse("https://www.youtube.com/watch?v=o_3jJG_oGSs"),
        parse("https://www.reddit.com/r/BlackMetal/comments/5elhkp/spectral_lore_cosmic_significance/"),
    ]


def test_extract_links_from_bookmark_file(fixtures_dir):
    links = extract_links(
        read_lines(fixtures_dir / "example_bookmark.html"), "bookmark", target_host="www.reddit.com"
    )

    assert [identifier_of(link) for link in links] == ["5k0ncr", "3quxqv", "5k0ncr"]
    assert len(dedupe_links(links)) == 2


def test_extract_links_without_host_filter_keeps_everything_parseable():
    links = extract_links(["https://www.youtube.com/watch?v=x", "nope"], "plain")
    assert links == [parse("https://www.youtube.com/watch?v=x")]


def test_dedupe_links_preserves_first_occurrence_order():
    a, b = parse("https://www.reddit.com/r/a/comments/aa/x/"), parse("https://www.reddit.com/r/b/comments/bb/y/")
    same_as_a = parse("HTTPS://WWW.REDDIT.COM/r/a/comments/aa/x/")

    assert dedupe_links([a, b, same_as_a, b]) == [a, b]


def test_collect_cached_answers_hits_only(tmp_path, post_link, post_document):
    cache = Cache.new(tmp_path)
    cache.store("5k0ncr", post_document)
    hit = parse(post_link)
    miss = parse("https://www.reddit.com/r/Metal/comments/zzz999/other/")
    shallow = parse("https://www.reddit.com/")

    entries, answered = collect_cached([hit, miss, shallow], cache)

    assert entries == [decode(post_document)]
    assert answered == {hit}


def test_find_missing_uses_self_links_and_direct_hits(post_link, post_document):
    cached = [decode(post_document)]
    permalink = parse(post_link)
    # Same post reached through a link form that differs from the permalink
    other_form = parse("https://www.reddit.com/r/Metal/comments/5k0ncr/black_weakling_dead_as_dreams")
    new = parse("https://www.reddit.com/r/Metal/comments/zzz999/other/")

    assert find_missing([permalink, new], cached) == [new]
    assert find_missing([other_form, new], cached) == [other_form, new]
    assert find_missing([other_form, new], cached, answered={other_form}) == [new]


def test_fetch_and_cache_stores_raw_even_when_decode_fails(tmp_path, make_fetcher):
    link = parse("https://www.reddit.com/r/Metal/comments/abc123/title/")
    fetcher = make_fetcher({link.value: "[]"})
    cache = Cache.new(tmp_path)

    assert fetch_and_cache(link, fetcher, cache=cache) is None
    assert cache.try_get("abc123") == "[]"
    assert (tmp_path / "abc123.json").read_text(encoding="utf-8") == "[]"


def test_fetch_and_cache_failed_fetch_writes_nothing(tmp_path, make_fetcher):
    link = parse("https://www.reddit.com/r/Metal/comments/abc123/title/")
    cache = Cache.new(tmp_path)

    assert fetch_and_cache(link, make_fetcher(), cache=cache) is None
    assert len(cache) == 0
    assert list(tmp_path.iterdir()) == []


def test_fetch_and_cache_survives_store_failure(tmp_path, make_fetcher):
    link = parse("https://www.reddit.com/r/Metal/comments/abc123/a_title/")
    fetcher = make_fetcher({link.value: make_document("abc123")})
    cache = Cache.new(tmp_path / "cache")
    (tmp_path / "cache").rmdir()

    entry = fetch_and_cache(link, fetcher, cache=cache)

    assert entry is not None
    assert entry.id == "abc123"
    assert cache.try_get("abc123") is None


def test_resolve_links_cache_then_network(tmp_path, make_fetcher, post_link, post_document):
    cache = Cache.new(tmp_path)
    cache.store("5k0ncr", post_document)

    fresh = parse("https://www.reddit.com/r/Metal/comments/abc123/a_title/")
    broken = parse("https://www.reddit.com/r/Metal/comments/dead00/gone/")
    fetcher = make_fetcher({fresh.value: make_document("abc123")})
    stats = ScrapeStats()

    entries = resolve_links(
        [parse(post_link), fresh, broken, fresh],
        fetcher,
        cache=cache,
        pace=no_wait(),
        stats=stats,
    )

    assert [e.id for e in entries] == ["5k0ncr", "abc123"]
    assert fetcher.calls == [fresh, broken]
    assert (stats.unique_links, stats.cached, stats.fetched, stats.failed) == (3, 1, 1, 1)
    assert cache.identifiers() == ["5k0ncr", "abc123"]


def test_resolve_links_fetches_each_post_once_per_run(tmp_path, make_fetcher, post_link, post_document):
    # Two spellings of one uncached post: the second is served by the first fetch.
    fetcher = make_fetcher({post_link: post_document, post_link.rstrip("/"): post_document})
    cache = Cache.new(tmp_path)

    entries = resolve_links(
        [parse(post_link), parse(post_link.rstrip("/"))], fetcher, cache=cache, pace=no_wait()
    )

    assert fetcher.calls == [parse(post_link)]
    assert [e.id for e in entries] == ["5k0ncr"]
    assert cache.identifiers() == ["5k0ncr"]


def test_resolve_links_without_cache_fetches_everything(make_fetcher, post_link, post_document):
    fetcher = make_fetcher({post_link: post_document})

    entries = resolve_links([parse(post_link)], fetcher, cache=None, pace=no_wait())

    assert entries == [decode(post_document)]
    assert fetcher.calls == [parse(post_link)]


def test_resolve_links_paces_every_network_call(make_fetcher):
    links = [parse(f"https://www.reddit.com/r/Metal/comments/id{i:04d}/t/") for i in range(3)]
    fetcher = make_fetcher({link.value: make_document(f"id{i:04d}") for i, link in enumerate(links)})

    sleeps = []
    now = [0.0]
    pace = Throttle(3.0, clock=lambda: now[0], sleep=lambda s: (sleeps.append(s), now.__setitem__(0, now[0] + s)))

    resolve_links(links, fetcher, pace=pace)

    assert sleeps == [3.0, 3.0]
    assert fetcher.calls == links
