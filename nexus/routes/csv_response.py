from fastapi import Response


def csv_response(content: str, filename: str) -> Response:
    """CSV body served as a file download."""
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
