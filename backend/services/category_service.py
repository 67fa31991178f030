from datastore import DataHandle

CATEGORIES_TABLE = "categories"
UNKNOWN_CATEGORY = "Unknown"


class CategoryService:
    @staticmethod
    def list_for(db: DataHandle, user_id: str) -> list:
        """The caller's own categories plus the shared ones."""
        own = db.select(CATEGORIES_TABLE, filters={"user_id": user_id})
        shared = db.select(CATEGORIES_TABLE, filters={"user_id__is": None})
        return sorted(shared + own, key=lambda c: c["name"].lower())

    @staticmethod
    def attach_names(db: DataHandle, rows: list) -> list:
        """Add `categories: {"name": ...}` to each row, as the PostgREST embed would."""
        ids = sorted({r["category_id"] for r in rows if r.get("category_id")})
        names = {}
        if ids:
            for c in db.select(CATEGORIES_TABLE, filters={"id__in": ids}, columns="id,name"):
                names[c["id"]] = c["name"]
        for r in rows:
            name = names.get(r.get("category_id"))
            r["categories"] = {"name": name} if name is not None else None
        return rows
