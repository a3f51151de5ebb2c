import logging
from types import ModuleType
from typing import Iterable, List, Set, Tuple

from aiohttp import hdrs, web

from sound.makin.backend.loader import LoadReport, load_and_apply, module_slug

logger = logging.getLogger(__name__)


def mount_path(base_path: str, filename: str) -> str:
    """
    Return the path a route module is mounted at.

    The slug of the filename is appended to base_path, except for "index" which mounts at
    base_path itself.
    """
    slug = module_slug(filename)
    if slug == "index":
        return base_path
    return f"{base_path}/{slug}"


def join_path(prefix: str, path: str) -> str:
    if path in ("", "/"):
        return prefix or "/"
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{prefix}{path}"


def prefixed_routes(
    prefix: str, table: web.RouteTableDef
) -> List[web.RouteDef]:
    routes = []
    for route in table:
        if not isinstance(route, web.RouteDef):
            raise TypeError(f"Unsupported route definition {route!r}")
        routes.append(
            web.route(
                route.method,
                join_path(prefix, route.path),
                route.handler,
                **route.kwargs,
            )
        )
    return routes


def route_keys(route: web.RouteDef) -> List[Tuple[str, str]]:
    """
    Return the (method, canonical path) pairs a route definition occupies on the router.

    GET routes also answer HEAD unless registered with allow_head=False.
    """
    if "{" in route.path:
        canonical = web.DynamicResource(route.path).canonical
    else:
        canonical = route.path
    keys = [(route.method, canonical)]
    if route.method == hdrs.METH_GET and route.kwargs.get("allow_head", True):
        keys.append((hdrs.METH_HEAD, canonical))
    return keys


def mounted_keys(app: web.Application) -> Set[Tuple[str, str]]:
    return {
        (route.method, route.resource.canonical)
        for route in app.router.routes()
        if route.resource is not None
    }


def check_clashes(app: web.Application, routes: Iterable[web.RouteDef]) -> None:
    """
    Raise RuntimeError if any route is already on the router or repeated within routes.

    Nothing is added to the router here, so a module with a clash is rejected as a whole.
    """
    taken = mounted_keys(app)
    for route in routes:
        for method, canonical in route_keys(route):
            paths = {path for _, path in taken}
            if (
                (method, canonical) in taken
                or (hdrs.METH_ANY, canonical) in taken
                or (method == hdrs.METH_ANY and canonical in paths)
            ):
                raise RuntimeError(f"{method} {canonical} is already mounted")
            taken.add((method, canonical))


async def mount_routes(
    app: web.Application, routes_path: str, base_path: str
) -> LoadReport:
    """
    Mount every route module in routes_path onto app under base_path.

    Each module must expose `routes`, an aiohttp RouteTableDef whose paths are relative
    to the module's mount path. Modules whose filenames share a slug are all mounted at
    the same path. A module defining a method and path that is already mounted is
    reported as a load error and none of its routes are added.

    Must be called before the application starts, the router is frozen after that.
    """
    base_path = base_path.rstrip("/")

    def mount(module: ModuleType, filename: str) -> None:
        table = getattr(module, "routes", None)
        if not isinstance(table, web.RouteTableDef):
            raise AttributeError(f"{filename} does not expose a RouteTableDef named routes")

        prefix = mount_path(base_path, filename)
        routes = prefixed_routes(prefix, table)
        check_clashes(app, routes)
        app.add_routes(routes)
        logger.info("Mounted %s at %s", filename, prefix or "/")

    return await load_and_apply(routes_path, mount)
