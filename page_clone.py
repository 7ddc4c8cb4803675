#!/usr/bin/env python3
"""Clone a single web page and the assets it references for offline viewing."""
import argparse
import logging
import mimetypes
import os
import posixpath
import re
import sys
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from threading import Condition, Lock
from typing import Deque, Dict, List, Optional, Set, Union
from urllib.parse import quote, unquote, urldefrag, urljoin, urlparse, urlsplit

import requests
from bs4 import BeautifulSoup, FeatureNotFound, Tag
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

# -------------------- Config --------------------

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)

DEFAULT_HEADERS = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.7",
}

CSS_URL_RE = re.compile(r"url\(\s*([\"']?)([^)\"']+)\1\s*\)", re.IGNORECASE)
SRCSET_SPLIT_RE = re.compile(r"\s*,\s*")
WS_RE = re.compile(r"\s+")

FETCHABLE_SCHEMES = {"http", "https"}

# reference kinds
KIND_STYLESHEET = "css"
KIND_SCRIPT = "js"
KIND_IMAGE = "img"
KIND_HYPERLINK = "link"
KIND_CSS_URL = "css-url"


@dataclass
class Settings:
    timeout: float = 30.0
    concurrency: int = 5
    # upper bound on how long the admission loop sleeps between checks
    poll_interval: float = 0.1
    max_bytes: int = 50_000_000
    skip_js: bool = False
    user_agent: str = DEFAULT_USER_AGENT
    index_name: str = "index.html"


# -------------------- Errors --------------------


class CloneError(Exception):
    """Base class for everything the clone pipeline raises."""


class EntryFetchError(CloneError):
    """The entry page could not be fetched. Always fatal."""


class AssetFetchError(CloneError):
    """An asset download failed. The item is dropped and the clone goes on."""


class InvalidReferenceError(CloneError):
    """A reference found in a document is not a usable URL."""


class WriteError(CloneError):
    """A file could not be written under the output directory."""


# -------------------- Utils --------------------


def can_fetch_url(u: Optional[str]) -> bool:
    if not u:
        return False
    u = u.strip()
    if not u or u.startswith(("#", "mailto:", "tel:", "javascript:", "data:", "blob:")):
        return False
    return True


def canonical_url(u: str) -> str:
    return urldefrag(u)[0]


def is_same_origin(base: str, other: str) -> bool:
    b, o = urlparse(base), urlparse(other)
    return (b.scheme, b.netloc) == (o.scheme, o.netloc)


def resolve_reference(base_url: str, raw_url: str) -> str:
    """Resolve ``raw_url`` against ``base_url`` into a canonical http(s) URL.

    Raises InvalidReferenceError when the result cannot be parsed or is not
    something we can download.
    """
    raw = raw_url.strip()
    try:
        absolute = urljoin(base_url, raw)
        parsed = urlparse(absolute)
        parsed.port  # raises ValueError on a malformed port
    except ValueError as e:
        raise InvalidReferenceError(f"invalid URL {raw_url!r}: {e}") from e
    if parsed.scheme not in FETCHABLE_SCHEMES or not parsed.netloc:
        raise InvalidReferenceError(f"unsupported URL {raw_url!r}")
    return canonical_url(absolute)


def build_session(settings: Optional[Settings] = None) -> requests.Session:
    settings = settings or Settings()
    s = requests.Session()
    # no retries anywhere: a failed asset is logged and dropped
    retry = Retry(total=0, read=False, raise_on_status=False)
    pool = max(10, settings.concurrency)
    adapter = HTTPAdapter(max_retries=retry, pool_connections=pool, pool_maxsize=pool)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    s.headers.update(DEFAULT_HEADERS)
    s.headers["User-Agent"] = settings.user_agent
    return s


def ensure_parent_dir(p: Path) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)


def is_success(status: int) -> bool:
    return 200 <= status < 300


# -------------------- HTML utils --------------------


def bs4_parse(html: Union[str, bytes]) -> BeautifulSoup:
    try:
        return BeautifulSoup(html, "lxml")
    except FeatureNotFound:
        return BeautifulSoup(html, "html.parser")


def effective_base_url(soup: BeautifulSoup, fallback: str) -> str:
    tag = soup.find("base", href=True)
    if tag and tag.get("href"):
        try:
            return urljoin(fallback, tag["href"])
        except ValueError:
            logging.warning("ignoring invalid <base href=%r>", tag["href"])
    return fallback


def serialize_html(soup: BeautifulSoup) -> str:
    return soup.decode(formatter="html")


def declared_encoding(resp: requests.Response) -> Optional[str]:
    # requests falls back to ISO-8859-1 for any text/* without a charset
    content_type = resp.headers.get("Content-Type", "")
    if "charset=" in content_type.lower():
        return resp.encoding
    return None


def response_markup(resp: requests.Response) -> Union[str, bytes]:
    # undeclared charset: let BeautifulSoup honour <meta charset>
    if declared_encoding(resp):
        return resp.text
    return resp.content


# -------------------- Path resolver --------------------


def local_path_for_url(url: str, index_name: str = "index.html") -> str:
    """Map an absolute URL to a relative on-disk path.

    Only the URL path is used, so ``/a.png?v=1`` and ``/a.png?v=2`` share a
    file and whichever is written last wins.
    """
    raw = urlparse(url).path
    # decode per segment so an escaped "/" cannot introduce a directory
    segs = [unquote(seg).replace("/", "_") for seg in raw.split("/")]
    segs = [seg for seg in segs if seg and seg not in (".", "..")]
    if not segs or raw.endswith("/"):
        segs.append(index_name)
    if not posixpath.splitext(segs[-1])[1]:
        segs[-1] += ".html"
    return "/".join(segs)


def escape_local_path(local_path: str) -> str:
    # decoded names may hold characters a relative URL would misread
    return local_path.replace("%", "%25").replace("#", "%23").replace("?", "%3F")


def local_href(local_path: str) -> str:
    return "./" + escape_local_path(local_path)


# -------------------- Extraction --------------------


@dataclass
class ResourceReference:
    element: Tag
    attr: str
    kind: str
    raw_url: str
    url: str


@dataclass(frozen=True)
class WorkItem:
    url: str
    local_path: str
    kind: str


def parse_srcset(v: str) -> List[str]:
    urls: List[str] = []
    if not v:
        return urls
    for cand in SRCSET_SPLIT_RE.split(v.strip()):
        if not cand:
            continue
        parts = WS_RE.split(cand.strip())
        if parts:
            urls.append(parts[0])
    return urls


def _reference(
    tag: Tag, attr: str, kind: str, raw: Optional[str], base: str
) -> Optional[ResourceReference]:
    if not can_fetch_url(raw):
        return None
    try:
        url = resolve_reference(base, raw)
    except InvalidReferenceError as e:
        logging.warning("skipping reference in <%s %s>: %s", tag.name, attr, e)
        return None
    return ResourceReference(tag, attr, kind, raw, url)


def extract_asset_references(
    soup: BeautifulSoup, page_url: str, *, skip_js: bool = False
) -> List[ResourceReference]:
    """Find stylesheets, scripts, images and srcset candidates in ``soup``.

    Every reference is resolved against the page URL (or its ``<base href>``).
    Unparseable ones are logged and left out.
    """
    base = effective_base_url(soup, page_url)
    refs: List[Optional[ResourceReference]] = []
    for link in soup.select("link[href]"):
        rels = {r.lower() for r in (link.get("rel") or [])}
        if "stylesheet" in rels:
            refs.append(_reference(link, "href", KIND_STYLESHEET, link.get("href"), base))
    if not skip_js:
        for tag in soup.select("script[src]"):
            refs.append(_reference(tag, "src", KIND_SCRIPT, tag.get("src"), base))
    for tag in soup.select("img[src]"):
        refs.append(_reference(tag, "src", KIND_IMAGE, tag.get("src"), base))
    for tag in soup.select("img[srcset]"):
        for u in parse_srcset(tag.get("srcset", "")):
            refs.append(_reference(tag, "srcset", KIND_IMAGE, u, base))
    return [r for r in refs if r is not None]


def extract_hyperlinks(soup: BeautifulSoup, page_url: str) -> List[ResourceReference]:
    base = effective_base_url(soup, page_url)
    refs: List[ResourceReference] = []
    for a in soup.select("a[href]"):
        ref = _reference(a, "href", KIND_HYPERLINK, a.get("href"), base)
        if ref is not None:
            refs.append(ref)
    return refs


# -------------------- Rewriters --------------------


def rewrite_srcset(value: str, mapping: Dict[str, str]) -> str:
    parts = []
    for candidate in SRCSET_SPLIT_RE.split(value.strip()):
        if not candidate:
            continue
        comp = WS_RE.split(candidate.strip())
        url_part = comp[0]
        desc = " ".join(comp[1:])
        parts.append(f"{mapping.get(url_part, url_part)} {desc}".strip())
    return ", ".join(parts)


def rewrite_asset_reference(ref: ResourceReference, local_path: str) -> None:
    tag = ref.element
    target = local_href(local_path)
    if ref.attr == "srcset":
        tag["srcset"] = rewrite_srcset(tag.get("srcset", ""), {ref.raw_url: target})
    else:
        tag[ref.attr] = target
    # SRI hashes and CORS mode make browsers reject file:// copies
    for rm in ("integrity", "crossorigin"):
        if rm in tag.attrs:
            del tag.attrs[rm]


def rewrite_hyperlinks(
    soup: BeautifulSoup, page_url: str, origin_url: str, index_name: str = "index.html"
) -> int:
    """Point same-origin ``<a href>`` links at their local paths.

    Links are rewritten only; nothing is scheduled for download.
    """
    count = 0
    for ref in extract_hyperlinks(soup, page_url):
        if not is_same_origin(origin_url, ref.url):
            continue
        href = local_href(local_path_for_url(ref.url, index_name))
        frag = urldefrag(ref.raw_url.strip())[1]
        if frag:
            href = f"{href}#{frag}"
        ref.element["href"] = href
        count += 1
    return count


# -------------------- Scheduler --------------------


class DownloadScheduler:
    """Bounded-concurrency download queue with URL de-duplication.

    ``downloaded`` holds every canonical URL that was ever enqueued. It is
    checked and extended under ``lock`` so no URL is admitted twice, even
    when a stylesheet worker enqueues while the admission loop runs.
    """

    def __init__(
        self,
        session: requests.Session,
        output_root: Path,
        settings: Optional[Settings] = None,
        downloaded: Optional[Set[str]] = None,
    ):
        self.session = session
        self.output_root = Path(output_root)
        self.settings = settings or Settings()
        self.downloaded: Set[str] = downloaded if downloaded is not None else set()
        self.queue: Deque[WorkItem] = deque()
        self.active = 0
        self.max_active = 0
        self.fetched: List[str] = []
        self.failed: Dict[str, str] = {}
        self.lock = Lock()
        self._wake = Condition(self.lock)

    def enqueue(self, item: WorkItem) -> bool:
        with self.lock:
            if item.url in self.downloaded:
                logging.debug("already queued: %s", item.url)
                return False
            self.downloaded.add(item.url)
            self.queue.append(item)
            self._wake.notify_all()
        return True

    def drain(self) -> None:
        """Run until the queue is empty and nothing is in flight.

        A finishing stylesheet may enqueue more work, so emptiness is only
        trusted once the active count is also zero.
        """
        ceiling = max(1, self.settings.concurrency)
        with ThreadPoolExecutor(max_workers=ceiling) as pool:
            while True:
                with self._wake:
                    if not self.queue and self.active == 0:
                        break
                    if not self.queue or self.active >= ceiling:
                        self._wake.wait(self.settings.poll_interval)
                        continue
                    item = self.queue.popleft()
                    self.active += 1
                    self.max_active = max(self.max_active, self.active)
                pool.submit(self._run, item)

    def _run(self, item: WorkItem) -> None:
        try:
            self.download(item)
        except CloneError as e:
            logging.warning("%s", e)
            with self.lock:
                self.failed[item.url] = str(e)
        except Exception as e:
            logging.exception("unexpected error downloading %s", item.url)
            with self.lock:
                self.failed[item.url] = repr(e)
        finally:
            with self._wake:
                self.active -= 1
                self._wake.notify_all()

    def download(self, item: WorkItem) -> Path:
        logging.info("downloading: %s", item.url)
        try:
            resp = self.session.get(item.url, timeout=self.settings.timeout, stream=True)
        except requests.RequestException as e:
            raise AssetFetchError(f"error downloading {item.url}: {e}") from e
        try:
            if not is_success(resp.status_code):
                raise AssetFetchError(f"failed {item.url} -> HTTP {resp.status_code}")
            local_path = self.output_root / item.local_path
            truncated = self._write(item, resp, local_path)
            encoding = declared_encoding(resp) or "utf-8"
        finally:
            resp.close()
        if truncated:
            raise AssetFetchError(
                f"truncated {item.url} at {self.settings.max_bytes} bytes"
            )

        if item.kind == KIND_STYLESHEET:
            self.process_stylesheet(item, local_path, encoding)

        with self.lock:
            self.fetched.append(item.url)
        logging.debug("saved %s -> %s", item.url, local_path)
        return local_path

    def _write(self, item: WorkItem, resp: requests.Response, local_path: Path) -> bool:
        """Stream the body to disk. Returns True when cut off at max_bytes."""
        written = 0
        truncated = False
        try:
            ensure_parent_dir(local_path)
            with open(local_path, "wb") as f:
                for chunk in resp.iter_content(chunk_size=64 * 1024):
                    if not chunk:
                        continue
                    room = self.settings.max_bytes - written
                    if len(chunk) > room:
                        f.write(chunk[:room])
                        written += room
                        truncated = True
                        break
                    f.write(chunk)
                    written += len(chunk)
        except requests.RequestException as e:
            raise AssetFetchError(f"error downloading {item.url}: {e}") from e
        except OSError as e:
            raise WriteError(f"cannot write {local_path}: {e}") from e
        if written == 0:
            logging.warning("empty response %s", item.url)
        return truncated

    def process_stylesheet(self, item: WorkItem, css_path: Path, encoding: str) -> int:
        """Queue the ``url(...)`` targets of a saved stylesheet and rewrite them.

        Rewritten references are relative to the stylesheet's own directory.
        Returns the number of newly queued items.
        """
        css_dir = css_path.parent
        queued = 0

        def repl(m: re.Match) -> str:
            nonlocal queued
            q = m.group(1) or ""
            raw = m.group(2).strip()
            if not can_fetch_url(raw):
                return m.group(0)
            try:
                absu = resolve_reference(item.url, raw)
            except InvalidReferenceError as e:
                logging.warning("skipping reference in %s: %s", item.url, e)
                return m.group(0)
            local = local_path_for_url(absu, self.settings.index_name)
            kind = KIND_STYLESHEET if local.lower().endswith(".css") else KIND_CSS_URL
            if self.enqueue(WorkItem(absu, local, kind)):
                queued += 1
            rel = Path(os.path.relpath(self.output_root / local, css_dir)).as_posix()
            rel = escape_local_path(rel)
            return f"url({q}{rel}{q})"

        try:
            text = css_path.read_text(encoding=encoding, errors="surrogateescape")
            new_text = CSS_URL_RE.sub(repl, text)
            if new_text != text:
                css_path.write_text(new_text, encoding=encoding, errors="surrogateescape")
        except (OSError, UnicodeError, LookupError) as e:
            raise WriteError(f"cannot rewrite stylesheet {css_path}: {e}") from e
        if queued:
            logging.info("stylesheet %s queued %d more asset(s)", item.url, queued)
        return queued


# -------------------- Orchestrator --------------------


class CloneState:
    INIT = "init"
    FETCHING_ENTRY_PAGE = "fetching-entry-page"
    EXTRACTING_AND_REWRITING = "extracting-and-rewriting"
    DRAINING = "draining"
    DONE = "done"
    FAILED = "failed"


@dataclass
class CloneResult:
    entry_url: str
    output_dir: Path
    index_path: Path
    fetched: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.failed


class SiteCloner:
    """Fetch one page, localise its references and download its assets."""

    def __init__(
        self,
        entry_url: str,
        output_dir: Union[str, Path],
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        self.entry_url = canonical_url(entry_url)
        self.output_dir = Path(output_dir)
        self.settings = settings or Settings()
        self.session = session if session is not None else build_session(self.settings)
        self.downloaded: Set[str] = set()
        self.scheduler = DownloadScheduler(
            self.session, self.output_dir, self.settings, self.downloaded
        )
        self.state = CloneState.INIT

    def _transition(self, state: str) -> None:
        logging.debug("clone state: %s -> %s", self.state, state)
        self.state = state

    def clone(self) -> CloneResult:
        self._transition(CloneState.FETCHING_ENTRY_PAGE)
        try:
            markup, page_url = self.fetch_entry_page()
        except EntryFetchError:
            self._transition(CloneState.FAILED)
            raise

        self._transition(CloneState.EXTRACTING_AND_REWRITING)
        soup = bs4_parse(markup)
        self.process_page(soup, page_url)
        try:
            index_path = self.write_entry_page(soup)
        except WriteError:
            self._transition(CloneState.FAILED)
            raise

        self._transition(CloneState.DRAINING)
        self.scheduler.drain()
        self._transition(CloneState.DONE)

        result = CloneResult(
            entry_url=self.entry_url,
            output_dir=self.output_dir,
            index_path=index_path,
            fetched=list(self.scheduler.fetched),
            failed=dict(self.scheduler.failed),
        )
        logging.info(
            "clone finished: %d asset(s) saved, %d failed",
            len(result.fetched),
            len(result.failed),
        )
        return result

    def fetch_entry_page(self):
        logging.info("GET %s", self.entry_url)
        try:
            resp = self.session.get(self.entry_url, timeout=self.settings.timeout)
        except requests.RequestException as e:
            raise EntryFetchError(f"failed to fetch {self.entry_url}: {e}") from e
        if not is_success(resp.status_code):
            raise EntryFetchError(
                f"failed to fetch {self.entry_url}: HTTP {resp.status_code}"
            )
        self.downloaded.add(self.entry_url)
        page_url = canonical_url(resp.url or self.entry_url)
        return response_markup(resp), page_url

    def process_page(self, soup: BeautifulSoup, page_url: str) -> int:
        """Rewrite every reference in ``soup`` and queue the assets.

        Returns the number of items queued.
        """
        queued = 0
        for ref in extract_asset_references(soup, page_url, skip_js=self.settings.skip_js):
            local = local_path_for_url(ref.url, self.settings.index_name)
            rewrite_asset_reference(ref, local)
            if self.scheduler.enqueue(WorkItem(ref.url, local, ref.kind)):
                queued += 1
        links = rewrite_hyperlinks(
            soup, page_url, self.entry_url, self.settings.index_name
        )
        logging.info("found %d asset(s), rewrote %d internal link(s)", queued, links)
        return queued

    def write_entry_page(self, soup: BeautifulSoup) -> Path:
        index_path = self.output_dir / self.settings.index_name
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            index_path.write_text(serialize_html(soup), encoding="utf-8")
        except OSError as e:
            raise WriteError(f"cannot write entry page {index_path}: {e}") from e
        return index_path


def clone_site(
    entry_url: str,
    output_dir: Union[str, Path],
    settings: Optional[Settings] = None,
    session: Optional[requests.Session] = None,
) -> CloneResult:
    return SiteCloner(entry_url, output_dir, settings, session).clone()


# -------------------- Preview server --------------------


class CloneRequestHandler(SimpleHTTPRequestHandler):
    """Static handler that falls back to the entry page for unknown paths."""

    def __init__(self, *args, directory: str, index_name: str = "index.html"):
        self._root = Path(directory).resolve()
        self._index_name = index_name
        super().__init__(*args, directory=str(self._root))

    def _exists(self, url_path: str) -> bool:
        fs_path = (self._root / url_path.lstrip("/")).resolve()
        try:
            fs_path.relative_to(self._root)
        except ValueError:
            return False
        return fs_path.exists()

    def _rewrite_request(self) -> None:
        split = urlsplit(self.path)
        path = posixpath.normpath(unquote(split.path))
        if not path.startswith("/"):
            path = "/" + path
        if path == "/" or self._exists(path):
            return
        if not posixpath.splitext(path)[1] and self._exists(path + ".html"):
            mapped = path + ".html"
        else:
            mapped = "/" + self._index_name
        self.path = quote(mapped, safe="/:@")

    def do_GET(self) -> None:  # noqa: N802
        self._rewrite_request()
        super().do_GET()

    def do_HEAD(self) -> None:  # noqa: N802
        self._rewrite_request()
        super().do_HEAD()

    def guess_type(self, path) -> str:
        mimetypes.add_type("text/javascript", ".js")
        mimetypes.add_type("text/javascript", ".mjs")
        mimetypes.add_type("font/woff2", ".woff2")
        return super().guess_type(path)


def make_server(
    directory: Union[str, Path], port: int = 3000, bind: str = "127.0.0.1"
) -> ThreadingHTTPServer:
    root = Path(directory).resolve()
    if not root.is_dir():
        raise SystemExit(f"Clone directory does not exist: {root}")
    handler_cls = partial(CloneRequestHandler, directory=str(root))
    return ThreadingHTTPServer((bind, port), handler_cls)


def serve_directory(
    directory: Union[str, Path], port: int = 3000, bind: str = "127.0.0.1"
) -> None:
    server = make_server(directory, port, bind)
    host, real_port = server.server_address[:2]
    print(f"Serving {Path(directory).resolve()} on http://{host}:{real_port}")
    print("Press Ctrl+C to stop the server")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()


# -------------------- Config loader --------------------


def load_config_file(path: str) -> Dict[str, Union[str, int, float, bool]]:
    p = Path(path)
    suf = p.suffix.lower()
    if suf in {".toml", ".tml"}:
        import tomllib

        with open(p, "rb") as f:
            return tomllib.load(f) or {}
    elif suf in {".yaml", ".yml"}:
        try:
            import yaml
        except ImportError:
            raise RuntimeError("YAML config requires 'PyYAML'")
        with open(p, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise RuntimeError("Top-level YAML must be a mapping")
            return data
    else:
        raise RuntimeError("Unsupported config format. Use .toml or .yaml")


def flatten_config(cfg: Dict) -> Dict:
    flat = {k: v for k, v in cfg.items() if not isinstance(v, dict)}
    for g in ("general", "clone", "serve"):
        if isinstance(cfg.get(g), dict):
            flat.update(cfg[g])
    return flat


# -------------------- CLI --------------------


def build_arg_parser(defaults: Optional[Dict] = None) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="page-clone",
        description="Clone a web page and its assets for offline viewing.",
    )
    p.add_argument("--config", type=str, help="path to config.toml|.yaml", default=None)
    p.add_argument("--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    c = sub.add_parser("clone", help="clone a web page for offline viewing")
    c.add_argument("url", help="http(s) URL of the page to clone")
    c.add_argument(
        "-o", "--output", default="./cloned-site", help="output directory"
    )
    c.add_argument("--timeout", type=float, default=30.0, help="request timeout seconds")
    c.add_argument("--concurrency", type=int, default=5, help="concurrent downloads")
    c.add_argument(
        "--max-bytes", type=int, default=50_000_000, help="max bytes per file"
    )
    c.add_argument("--skip-js", action="store_true", help="do not download script files")
    c.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")

    s = sub.add_parser("serve", help="serve a cloned page locally")
    s.add_argument("directory", help="directory containing the clone")
    s.add_argument("-p", "--port", type=int, default=3000, help="port to serve on")
    s.add_argument("--bind", default="127.0.0.1", help="bind address")

    if defaults:
        c.set_defaults(**defaults)
        s.set_defaults(**defaults)
    return p


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    preliminary, _ = build_arg_parser().parse_known_args(argv)
    defaults = None
    if preliminary.config:
        defaults = flatten_config(load_config_file(preliminary.config))
    return build_arg_parser(defaults).parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> Settings:
    return Settings(
        timeout=max(1.0, args.timeout),
        concurrency=max(1, args.concurrency),
        max_bytes=max(1024, args.max_bytes),
        skip_js=args.skip_js,
        user_agent=args.user_agent,
    )


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    if args.command == "serve":
        serve_directory(args.directory, args.port, args.bind)
        return

    if urlparse(args.url).scheme not in FETCHABLE_SCHEMES:
        print("Invalid URL. Use http:// or https://")
        sys.exit(1)

    settings = settings_from_args(args)
    print("Reminder: only clone content you own or have permission to copy.")
    try:
        result = clone_site(args.url, args.output, settings)
    except CloneError as e:
        logging.error("%s", e)
        sys.exit(1)

    print("Cloning complete")
    print(f"Saved to: {result.index_path.resolve()}")
    if not result.complete:
        print(f"{len(result.failed)} asset(s) could not be downloaded")


if __name__ == "__main__":
    main()
