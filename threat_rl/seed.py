# threat_rl/seed.py

"""
Bundled seed corpus: curated 2023–2024 CVEs with community discussion.

Entries are in timeline order (2023 first) because corpus order drives the
progressive replay. Features come from `estimate_engagement` since the posts
carry no timestamps; ground truth is the community assessment.
"""

import logging

from .corpus import Corpus
from .features import Post, estimate_engagement
from .records import FeatureRecord

logger = logging.getLogger(__name__)

# (cve_id, community_assessment, [(author, text, retweets, is_expert), ...])
SEED_ASSESSMENTS = [
    # ── 2023 ──
    ("CVE-2023-46604", "critical", [
        ("GossiTheDog",   "Apache ActiveMQ RCE critical",        812, True),
        ("vxunderground", "ActiveMQ exploit public",             645, True),
        ("x0rz",          "CVE-2023-46604 being mass scanned",   534, True),
    ]),
    ("CVE-2023-4966", "critical", [
        ("GossiTheDog",     "Citrix Bleed - NetScaler ADC RCE",  923, True),
        ("SwiftOnSecurity", "Citrix CVE-2023-4966 serious",      712, True),
    ]),
    ("CVE-2023-22515", "critical", [
        ("vxunderground", "Atlassian Confluence auth bypass",    456, True),
        ("troyhunt",      "Confluence CVE getting exploited",    389, True),
    ]),
    ("CVE-2023-34362", "critical", [
        ("GossiTheDog", "MOVEit Transfer SQLi - massive",          1234, True),
        ("briankrebs",  "MOVEit breach affecting hundreds",         978, True),
        ("x0rz",        "CVE-2023-34362 supply chain nightmare",    867, True),
    ]),
    ("CVE-2023-20198", "critical", [
        ("vxunderground", "Cisco IOS XE web UI exploit",         645, True),
        ("GossiTheDog",   "Cisco routers getting pwned",         534, True),
    ]),
    ("CVE-2023-36884", "high", [
        ("SwiftOnSecurity", "Microsoft Office RCE via RTF",      423, True),
        ("troyhunt",        "Office exploit in the wild",        356, True),
    ]),
    ("CVE-2023-27997", "high", [
        ("GossiTheDog",   "FortiOS heap buffer overflow",        512, True),
        ("vxunderground", "Fortinet CVE-2023-27997",             434, True),
    ]),
    ("CVE-2023-28771", "high", [
        ("x0rz", "Zyxel firewall command injection", 289, True),
    ]),
    ("CVE-2023-38545", "high", [
        ("MalwareTechBlog", "curl SOCKS5 heap overflow",         378, True),
        ("taviso",          "curl bug interesting",              312, True),
    ]),
    ("CVE-2023-29357", "high", [
        ("SwiftOnSecurity", "SharePoint elevation bug", 234, True),
    ]),
    ("CVE-2023-26360", "medium", [
        ("random_user", "Adobe ColdFusion something", 89, False),
    ]),
    ("CVE-2023-32784", "medium", [
        ("infosec_news", "KeePass master password issue", 123, False),
    ]),
    ("CVE-2023-7028", "medium", [
        ("security_feed", "GitLab password reset bug", 167, False),
    ]),
    ("CVE-2023-21716", "medium", [
        ("some_researcher", "Microsoft Word RTF flaw", 98, False),
    ]),
    ("CVE-2023-35078", "medium", [
        ("tech_updates", "Ivanti EPMM auth bypass", 145, False),
    ]),
    ("CVE-2023-12345", "low", [
        ("random_dev", "Some random CMS bug", 23, False),
    ]),
    ("CVE-2023-99999", "low", [
        ("blogger123", "WordPress plugin minor issue", 34, False),
    ]),

    # ── 2024 ──
    ("CVE-2024-3400", "critical", [
        ("GossiTheDog",   "Palo Alto PAN-OS command injection RCE",  1456, True),
        ("vxunderground", "CVE-2024-3400 actively exploited",        1123, True),
        ("x0rz",          "PAN-OS exploit code public",               989, True),
    ]),
    ("CVE-2024-4577", "critical", [
        ("GossiTheDog",     "PHP-CGI argument injection CVE-2024-4577",  734, True),
        ("SwiftOnSecurity", "PHP RCE getting attention",                 623, True),
    ]),
    ("CVE-2024-21762", "critical", [
        ("vxunderground", "FortiOS SSL VPN buffer overflow",     845, True),
        ("GossiTheDog",   "Fortinet CVE-2024-21762 critical",    712, True),
    ]),
    ("CVE-2024-27198", "critical", [
        ("x0rz",     "JetBrains TeamCity auth bypass",           567, True),
        ("troyhunt", "TeamCity exploit spreading",               489, True),
    ]),
    ("CVE-2024-23897", "critical", [
        ("GossiTheDog",   "Jenkins arbitrary file read",         456, True),
        ("vxunderground", "Jenkins CVE-2024-23897",              378, True),
    ]),
    ("CVE-2024-50623", "critical", [
        ("GossiTheDog",   "Chrome zero-day being actively exploited",    523, True),
        ("vxunderground", "CVE-2024-50623 Chrome exploit in the wild",   312, True),
    ]),
    ("CVE-2024-49138", "critical", [
        ("x0rz",            "Windows Common Log File System elevation of privilege", 234, True),
        ("SwiftOnSecurity", "Microsoft patching CVE-2024-49138",                     445, True),
        ("troyhunt",        "Critical Windows vuln getting attention",               389, True),
    ]),
    ("CVE-2024-49112", "high", [
        ("GossiTheDog",   "Windows Lightweight Directory Access Protocol RCE",  412, True),
        ("vxunderground", "LDAP vuln CVE-2024-49112 quite serious",            298, True),
    ]),
    ("CVE-2024-11105", "high", [
        ("GossiTheDog", "GitLab path traversal CVE-2024-11105", 178, True),
    ]),
    ("CVE-2024-50340", "medium", [
        ("vxunderground", "Apache Tomcat DoS vulnerability", 92, True),
    ]),
    ("CVE-2024-49568", "low", [
        ("cybersec_updates", "Minor WordPress plugin issue", 34, False),
    ]),
    ("CVE-2024-10467", "critical", [
        ("GossiTheDog",   "Fortinet SSL VPN pre-auth RCE - very serious",  678, True),
        ("vxunderground", "CVE-2024-10467 Fortinet getting pwned",         534, True),
        ("x0rz",          "Fortinet RCE being weaponized",                 445, True),
    ]),
    ("CVE-2024-49039", "high", [
        ("SwiftOnSecurity", "Windows NTLM hash disclosure",      267, True),
        ("troyhunt",        "NTLM vuln CVE-2024-49039",          198, True),
    ]),
    ("CVE-2024-49019", "high", [
        ("MalwareTechBlog", "Active Directory Certificate Services escalation", 312, True),
        ("GossiTheDog",     "AD CS vuln worth patching",                        289, True),
    ]),
    ("CVE-2024-8939", "low", [
        ("random_user", "Some minor PHP CMS bug", 12, False),
    ]),
]


def seed_posts(entry) -> list[Post]:
    _cve_id, _assessment, posts = entry
    return [
        Post(author=author, text=text, retweets=retweets, is_expert=is_expert)
        for author, text, retweets, is_expert in posts
    ]


def seed_records() -> list[FeatureRecord]:
    records = []
    for entry in SEED_ASSESSMENTS:
        cve_id, assessment, _posts = entry
        metrics = estimate_engagement(seed_posts(entry))
        records.append(FeatureRecord(
            id=cve_id,
            features=metrics.to_features(),
            ground_truth_severity=assessment,
        ))
    return records


def seed_corpus() -> Corpus:
    corpus = Corpus(seed_records())
    logger.info("[Seed] Built seed corpus with %d CVEs", len(corpus))
    return corpus
