"""MBean canonical name parsing and tag derivation."""

from typing import Dict, Iterable, List, Mapping, Tuple

from ..exceptions import MalformedMBeanError, MalformedMBeanPropertyError

DOMAIN_TAG = "*domain"
DOMAIN_TAG_KEY = "_domain"


def split_mbean_name(mbean: str) -> Tuple[str, List[Tuple[str, str]]]:
    """
    Split an MBean canonical name into its domain and key properties.

    Args:
        mbean: Name such as ``java.lang:type=GarbageCollector,name=G1 Young``

    Returns:
        Tuple of domain and ordered (key, value) pairs

    Raises:
        MalformedMBeanError: No ':' separates the domain from the properties
        MalformedMBeanPropertyError: A property is not exactly one key=value pair
    """
    domain, sep, properties = mbean.partition(":")
    if not sep:
        raise MalformedMBeanError(
            f"There should be a colon in MBean name: {mbean!r}",
            context={"mbean": mbean},
        )

    pairs = []
    for item in properties.split(","):
        parts = item.split("=")
        if len(parts) != 2:
            raise MalformedMBeanPropertyError(
                f"Incorrect format of MBean name: {mbean!r} (property {item!r})",
                context={"mbean": mbean, "property": item},
            )
        pairs.append((parts[0], parts[1]))

    return domain, pairs


def parse_mbean_tags(
    mbean: str,
    tag_names: Iterable[str],
    default_tags: Mapping[str, str]
) -> Dict[str, str]:
    """
    Derive tags for one MBean instance.

    Starts from a copy of *default_tags*. Each key property whose key is in
    *tag_names* becomes a tag; the special name ``*domain`` adds the MBean
    domain as ``_domain``. Derived tags replace defaults with the same key.

    Args:
        mbean: MBean canonical name returned by the agent
        tag_names: Allowed property keys
        default_tags: Per-server tags

    Returns:
        Dict[str, str]: Resolved tags

    Raises:
        MalformedMBeanError, MalformedMBeanPropertyError: see split_mbean_name
    """
    allowed = set(tag_names)
    tags = dict(default_tags)

    domain, pairs = split_mbean_name(mbean)

    if DOMAIN_TAG in allowed:
        tags[DOMAIN_TAG_KEY] = domain

    for key, value in pairs:
        if key in allowed:
            tags[key.strip()] = value

    return tags
