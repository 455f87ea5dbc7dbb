"""Brand icons inferred from a link's domain, served by Iconify's Simple Icons set.

Explicit ``icon`` values in the configuration always take precedence.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlparse

from ..core.schemas import Link
from .resolver import DefaultIcon, IconDescriptor, IconifyRef, NamedCatalogRef, resolve_icon

SIMPLE_ICONS_SET = "simple-icons"

# Values are Simple Icons names or full "iconify:<set>:<name>" specs.
DOMAIN_ICONS = {
    # Code & development
    "github.com": "iconify:simple-icons:github",
    "gitlab.com": "gitlab",
    "bitbucket.org": "bitbucket",
    "stackoverflow.com": "stackoverflow",
    "dev.to": "devdotto",
    "codepen.io": "codepen",
    "replit.com": "replit",
    "codesandbox.io": "codesandbox",
    "npmjs.com": "npm",
    "pypi.org": "pypi",
    # Cloud & infrastructure
    "aws.amazon.com": "amazonaws",
    "cloud.google.com": "googlecloud",
    "azure.microsoft.com": "microsoftazure",
    "vercel.com": "vercel",
    "netlify.com": "netlify",
    "heroku.com": "heroku",
    "digitalocean.com": "digitalocean",
    "cloudflare.com": "cloudflare",
    "railway.app": "railway",
    "render.com": "render",
    # Communication
    "slack.com": "slack",
    "discord.com": "discord",
    "teams.microsoft.com": "microsoftteams",
    "zoom.us": "zoom",
    "meet.google.com": "googlemeet",
    "telegram.org": "telegram",
    "whatsapp.com": "whatsapp",
    # Productivity & project management
    "notion.so": "notion",
    "confluence.atlassian.net": "confluence",
    "atlassian.net": "atlassian",
    "trello.com": "trello",
    "asana.com": "asana",
    "linear.app": "linear",
    "monday.com": "mondaydotcom",
    "jira.atlassian.net": "jira",
    "clickup.com": "clickup",
    "airtable.com": "airtable",
    "coda.io": "coda",
    # Mail & office
    "mail.google.com": "gmail",
    "gmail.com": "gmail",
    "slides.google.com": "iconify:simple-icons:googleslides",
    "docs.google.com": "iconify:simple-icons:googledocs",
    "sheets.google.com": "iconify:simple-icons:googlesheets",
    "outlook.com": "microsoftoutlook",
    "protonmail.com": "protonmail",
    "fastmail.com": "fastmail",
    # Social
    "twitter.com": "x",
    "x.com": "x",
    "linkedin.com": "linkedin",
    "reddit.com": "reddit",
    "facebook.com": "facebook",
    "instagram.com": "instagram",
    "tiktok.com": "tiktok",
    "pinterest.com": "pinterest",
    "threads.net": "threads",
    "mastodon.social": "mastodon",
    "bsky.app": "bluesky",
    # Media
    "youtube.com": "youtube",
    "vimeo.com": "vimeo",
    "spotify.com": "spotify",
    "soundcloud.com": "soundcloud",
    "netflix.com": "netflix",
    "twitch.tv": "twitch",
    "podcasts.apple.com": "applepodcasts",
    # Design
    "figma.com": "figma",
    "dribbble.com": "dribbble",
    "behance.net": "behance",
    "canva.com": "canva",
    "sketch.com": "sketch",
    "adobe.com": "adobe",
    "framer.com": "framer",
    "invisionapp.com": "invision",
    # Analytics & monitoring
    "analytics.google.com": "googleanalytics",
    "mixpanel.com": "mixpanel",
    "amplitude.com": "amplitude",
    "sentry.io": "sentry",
    "datadog.com": "datadog",
    "newrelic.com": "newrelic",
    "grafana.com": "grafana",
    "hotjar.com": "hotjar",
    # Documentation
    "readthedocs.io": "readthedocs",
    "gitbook.com": "gitbook",
    "readme.io": "readme",
    "docusaurus.io": "docusaurus",
    # Commerce & finance
    "shopify.com": "shopify",
    "stripe.com": "stripe",
    "paypal.com": "paypal",
    "amazon.com": "amazon",
    "ebay.com": "ebay",
    "etsy.com": "etsy",
    "square.com": "square",
    # Storage
    "drive.google.com": "googledrive",
    "dropbox.com": "dropbox",
    "box.com": "box",
    "onedrive.live.com": "onedrive",
    "icloud.com": "icloud",
    # Reading
    "medium.com": "medium",
    "substack.com": "substack",
    "news.ycombinator.com": "ycombinator",
    "hackernews.com": "ycombinator",
    "rss.com": "rss",
    # AI & ML
    "chat.openai.com": "openai",
    "openai.com": "openai",
    "anthropic.com": "anthropic",
    "huggingface.co": "huggingface",
    "kaggle.com": "kaggle",
    "colab.research.google.com": "googlecolab",
    # CI/CD & DevOps
    "circleci.com": "circleci",
    "travis-ci.org": "travisci",
    "jenkins.io": "jenkins",
    "docker.com": "docker",
    "hub.docker.com": "docker",
    "kubernetes.io": "kubernetes",
    "terraform.io": "terraform",
    "ansible.com": "ansible",
    # Databases
    "mongodb.com": "mongodb",
    "postgresql.org": "postgresql",
    "mysql.com": "mysql",
    "redis.io": "redis",
    "supabase.com": "supabase",
    "firebase.google.com": "firebase",
    "planetscale.com": "planetscale",
    # Framework docs
    "reactjs.org": "react",
    "react.dev": "react",
    "vuejs.org": "vuedotjs",
    "angular.io": "angular",
    "svelte.dev": "svelte",
    "nextjs.org": "nextdotjs",
    "nuxt.com": "nuxtdotjs",
    "tailwindcss.com": "tailwindcss",
    # Everything else
    "calendly.com": "calendly",
    "cal.com": "caldotcom",
    "1password.com": "1password",
    "lastpass.com": "lastpass",
    "bitwarden.com": "bitwarden",
    "zendesk.com": "zendesk",
    "intercom.com": "intercom",
    "mailchimp.com": "mailchimp",
    "sendgrid.com": "sendgrid",
    "twilio.com": "twilio",
    "auth0.com": "auth0",
    "okta.com": "okta",
}

_HOST_RE = re.compile(r"https?://(?:www\.)?([^/]+)")


def extract_domain(url: str) -> str:
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        host = ""
    if not host:
        match = _HOST_RE.match(url)
        return match.group(1).lower() if match else ""
    host = host.lower()
    if host.startswith("www."):
        host = host[len("www."):]
    return host


def _descriptor(value: str) -> IconDescriptor:
    if value.startswith("iconify:"):
        return resolve_icon(value)
    return IconifyRef(set=SIMPLE_ICONS_SET, name=value)


def icon_for_url(url: str) -> Optional[IconDescriptor]:
    domain = extract_domain(url)
    if not domain:
        return None

    if domain in DOMAIN_ICONS:
        return _descriptor(DOMAIN_ICONS[domain])

    parts = domain.split(".")
    if len(parts) > 2:
        base = ".".join(parts[-2:])
        if base in DOMAIN_ICONS:
            return _descriptor(DOMAIN_ICONS[base])

    # Loose match on the first label, e.g. "mygithub.example" hits "github.com".
    # Known to misfire on substring collisions.
    for key, value in DOMAIN_ICONS.items():
        if "." in key and key.split(".")[0] in domain:
            return _descriptor(value)

    if domain.startswith("localhost") or domain.startswith("127.0.0.1"):
        return NamedCatalogRef(key="Terminal")

    return None


def icon_for_link(link: Link) -> IconDescriptor:
    if link.icon:
        return resolve_icon(link.icon)
    return icon_for_url(link.url) or DefaultIcon()
