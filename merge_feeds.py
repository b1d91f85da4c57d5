#!/usr/bin/env python3
"""
merge_feeds.py — merge local Atom feeds into one combined feed.

Entries are cut out of each source as raw <entry> fragments, sorted newest
first and re-emitted verbatim inside a fresh feed envelope.
"""
import argparse, os, re, sys, dataclasses, xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional
import yaml
from feed_utils import first_group, now_utc, iso_z, parse_feed_date

ATOM_NS = "http://www.w3.org/2005/Atom"

ENTRY_RE = re.compile(r'<entry>(.*?)</entry>', re.S)
TITLE_RE = re.compile(r'<title(?:[^>]*)>(.*?)</title>')
LINK_RE = re.compile(r'<link[^>]*href=["\'](.*?)["\'][^>]*/>')
CONTENT_RE = re.compile(r'<content(?:[^>]*)>(.*?)</content>', re.S)
SUMMARY_RE = re.compile(r'<summary(?:[^>]*)>(.*?)</summary>', re.S)
UPDATED_RE = re.compile(r'<updated>(.*?)</updated>')
PUBLISHED_RE = re.compile(r'<published>(.*?)</published>')
ID_RE = re.compile(r'<id>(.*?)</id>')


@dataclass(frozen=True)
class MergeConfig:
    feeds: tuple = ('funfacts.xml', 'wikivoyage.xml', 'hackernews.xml', 'medium_matteo.xml')
    public_dir: str = './public'
    output: str = 'all.xml'
    title: str = 'Combined Feed - All Sources'
    self_link: str = 'https://arbnorcyberlabs-eng.github.io/rss-feeds/all.xml'
    site_link: str = 'https://arbnorcyberlabs-eng.github.io/rss-feeds/'
    feed_id: Optional[str] = None
    author: str = 'RSS Feed Aggregator'

    @property
    def output_path(self):
        return os.path.join(self.public_dir, self.output)

    @classmethod
    def from_dict(cls, raw):
        known = {f.name for f in dataclasses.fields(cls)}
        kw = {k: v for k, v in raw.items() if k in known}
        if 'feeds' in kw:
            kw['feeds'] = tuple(kw['feeds'] or ())
        return cls(**kw)


@dataclass(frozen=True)
class Entry:
    title: str
    link: str
    content: str
    updated: str
    timestamp: object
    id: str
    xml: str
    source: Optional[str] = None


def load_config(path):
    if not path:
        return MergeConfig()
    with open(path, 'r', encoding='utf-8') as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a mapping at top level, got {type(raw).__name__}")
    return MergeConfig.from_dict(raw)


def load_feeds(feeds, public_dir):
    """Return [(name, text or None)] in configured order; None marks a missing file."""
    out = []
    for name in feeds:
        path = os.path.join(public_dir, name)
        if not os.path.exists(path):
            print(f"[WARN] {name} not found, skipping...", file=sys.stderr)
            out.append((name, None))
            continue
        # newline='' keeps fragments byte-identical on the way back out
        with open(path, 'r', encoding='utf-8', newline='') as f:
            out.append((name, f.read()))
    return out


def extract_entries(text, now=None, source=None):
    now = now or now_utc()
    entries = []
    for m in ENTRY_RE.finditer(text):
        body = m.group(1)
        title = first_group(TITLE_RE, body)
        link = first_group(LINK_RE, body)
        if title is None or link is None:
            continue
        content = first_group(CONTENT_RE, body)
        if content is None:
            content = first_group(SUMMARY_RE, body)
        updated = first_group(UPDATED_RE, body)
        if updated is None:
            updated = first_group(PUBLISHED_RE, body)
        if updated is None:
            updated, timestamp = iso_z(now), now
        else:
            timestamp = parse_feed_date(updated, default=now)
        entry_id = first_group(ID_RE, body)
        entries.append(Entry(
            title=title,
            link=link,
            content=content if content is not None else '',
            updated=updated,
            timestamp=timestamp,
            id=entry_id if entry_id is not None else link,
            xml=m.group(0),
            source=source,
        ))
    return entries


def merge_entries(groups):
    entries = [e for group in groups for e in group]
    # sorted() is stable, so equal timestamps keep source order
    return sorted(entries, key=lambda e: e.timestamp, reverse=True)


def render_feed(entries, config, now=None):
    now = now or now_utc()
    feed = ET.Element('feed', xmlns=ATOM_NS)
    ET.SubElement(feed, 'title').text = config.title
    ET.SubElement(feed, 'link', href=config.self_link, rel='self')
    ET.SubElement(feed, 'link', href=config.site_link)
    ET.SubElement(feed, 'updated').text = iso_z(now)
    ET.SubElement(feed, 'id').text = config.feed_id or config.self_link
    author = ET.SubElement(feed, 'author')
    ET.SubElement(author, 'name').text = config.author
    ET.indent(feed, space='  ')
    head, _ = ET.tostring(feed, encoding='unicode').rsplit('</feed>', 1)
    body = ''.join(f"  {e.xml}\n" for e in entries)
    return '<?xml version="1.0" encoding="utf-8"?>\n' + head + body + '</feed>'


def write_feed(xml, out_path):
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, 'w', encoding='utf-8', newline='') as f:
        f.write(xml)


def merge(config=None, now=None):
    config = config or MergeConfig()
    now = now or now_utc()
    groups = [extract_entries(text, now=now, source=name)
              for name, text in load_feeds(config.feeds, config.public_dir) if text is not None]
    entries = merge_entries(groups)
    out_path = config.output_path
    write_feed(render_feed(entries, config, now=now), out_path)
    print(f"[OK] Generated combined feed with {len(entries)} entries")
    print(f"[OK] Saved to {out_path}")
    return entries


def main(argv=None):
    ap = argparse.ArgumentParser(description="Merge local Atom feeds into one combined feed")
    ap.add_argument('--config', help="YAML config (default: ./config.yaml if present)")
    ap.add_argument('--dir', dest='public_dir', help="directory holding the source feeds")
    ap.add_argument('--out', help="output file name, relative to --dir")
    ap.add_argument('feeds', nargs='*', help="feed file names, in priority order")
    args = ap.parse_args(argv)

    path = args.config or ('config.yaml' if os.path.exists('config.yaml') else None)
    cfg = load_config(path)
    overrides = {}
    if args.public_dir: overrides['public_dir'] = args.public_dir
    if args.out: overrides['output'] = args.out
    if args.feeds: overrides['feeds'] = tuple(args.feeds)
    if overrides:
        cfg = dataclasses.replace(cfg, **overrides)
    merge(cfg)
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
