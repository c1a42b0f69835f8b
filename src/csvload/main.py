from fastapi import FastAPI, HTTPException, Request
from csvload.router import route
from csvload.utils.exceptions import InvalidOptionError, LineParseError

app = FastAPI(
    title="CSV Type Inference Service",
    version="1.0.0"
)

@app.post("/profile")
def profile_csv(payload: dict, request: Request):
    try:
        return route(payload, request)
    except InvalidOptionError as e:
        raise HTTPException(
            status_code=422,
            detail={
                "status": "ERROR",
                "option": e.option,
                "message": str(e),
            }
        )
    except LineParseError as e:
        # bad input document → client error, not server crash
        raise HTTPException(
            status_code=400,
            detail={
                "status": "ERROR",
                "line_number": e.line_number,
                "message": e.reason,
            }
        )
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail={"status": "ERROR", "message": str(e)})
