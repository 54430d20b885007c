from typing import Optional

from supabase import Client, create_client

from payroll.settings import SUPABASE_KEY, SUPABASE_URL


def create_supabase_client(url: Optional[str] = None, key: Optional[str] = None) -> Client:
    """Supabase 클라이언트 생성 (기본값은 .env의 SUPABASE_URL / SUPABASE_KEY)"""
    url = url or SUPABASE_URL
    key = key or SUPABASE_KEY
    if not url or not key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set")
    return create_client(url, key)


if __name__ == "__main__":
    print("✅ Supabase 연결 테스트 시작")
    print("URL:", SUPABASE_URL)
    print("KEY 앞부분:", (SUPABASE_KEY or "")[:10])

    try:
        supabase = create_supabase_client()
        res = supabase.table("labor_law_versions").select("*").eq("status", "ACTIVE").limit(1).execute()
        print("데이터 조회 성공 ✅", res.data)
    except Exception as e:
        print("❌ 에러 발생:", e)
