import os
import sys

import uvicorn

from accounts.core.config import settings

APP_URI = "accounts.main:app"


def main():
    if settings.debug:
        os.environ["PYTHONASYNCIODEBUG"] = "1"
        uvicorn.run(
            app=APP_URI,
            host=settings.backend_host,
            port=settings.backend_port,
            reload=settings.reload_uvicorn,
            workers=settings.workers_count,
        )
    elif sys.platform.startswith("linux"):
        from accounts.web import GunicornApplication

        options = {
            "bind": f"{settings.backend_host}:{settings.backend_port}",
            "workers": settings.workers_count,
            "worker_class": "uvicorn.workers.UvicornWorker",
        }
        GunicornApplication(APP_URI, options).run()
    else:
        uvicorn.run(
            app=APP_URI,
            host=settings.backend_host,
            port=settings.backend_port,
            reload=settings.reload_uvicorn,
            workers=settings.workers_count,
        )


if __name__ == "__main__":
    main()
