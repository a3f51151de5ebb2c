from aiohttp import web

routes = web.RouteTableDef()


@routes.get("/")
async def handle_index(request: web.Request) -> web.Response:
    return web.json_response({"name": "makin-backend", "status": "ok"})
