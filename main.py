import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from payroll.assembler import SalaryAssembler
from payroll.calculator import calculate_severance_pay
from payroll.datastore import SupabaseDataStore
from payroll.errors import (
    ContractNotFoundError,
    InvalidContractError,
    InvalidStatusTransitionError,
    PayrollError,
    SalaryLockedError,
    SalaryNotFoundError,
)
from payroll.manual_calculator import calculate_manual_pay
from payroll.settings import LOG_LEVEL, load_policy
from payroll.supabase_client import create_supabase_client
from schemas import BulkCalculateInput, CalculateSalaryInput, ConfirmSalaryInput, ManualPayInput, SeveranceInput

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Pay API")

# 🔸 CORS 설정 (모든 origin 허용 예시)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 또는 ["http://localhost:3000"] 등으로 제한 가능
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache
def get_assembler() -> SalaryAssembler:
    """Supabase 저장소를 주입한 SalaryAssembler (프로세스당 1개, 근로기준법 캐시 공유)"""
    return SalaryAssembler(SupabaseDataStore(create_supabase_client()), policy=load_policy())


# 예외 → HTTP 상태코드
ERROR_STATUS = {
    ContractNotFoundError: 404,
    SalaryNotFoundError: 404,
    SalaryLockedError: 409,
    InvalidStatusTransitionError: 409,
    InvalidContractError: 422,
}


@app.exception_handler(PayrollError)
async def payroll_error_handler(request: Request, exc: PayrollError):
    status_code = ERROR_STATUS.get(type(exc), 400)
    logger.info("%s %s -> %d: %s", request.method, request.url.path, status_code, exc)
    return JSONResponse(status_code=status_code, content={"error": type(exc).__name__, "detail": str(exc)})


# 기본 루트 라우터
@app.get("/")
def root():
    return {"message": "Pay API"}


# 직원 1명 월 급여 계산
@app.post("/salaries/calculate")
def calculate(input: CalculateSalaryInput, assembler: SalaryAssembler = Depends(get_assembler)):
    if input.save:
        return assembler.calculate_and_save(input.staffId, input.year, input.month)
    return assembler.calculate_monthly_salary(input.staffId, input.year, input.month)


# 회사 전체 월 급여 일괄 계산 (실패한 직원은 건너뜀)
@app.post("/salaries/calculate-bulk")
def calculate_bulk(input: BulkCalculateInput, assembler: SalaryAssembler = Depends(get_assembler)):
    result = assembler.bulk_report(input.companyId, input.year, input.month, save=input.save)
    return {
        "calculations": result.calculations,
        "total": len(result.calculations) + len(result.failures),
        "success": len(result.calculations),
        "failed": len(result.failures),
        "failures": [{"staffId": f.staff_id, "error": f.error} for f in result.failures],
    }


# 급여 확정
@app.post("/salaries/{salary_id}/confirm")
def confirm(salary_id: str, input: ConfirmSalaryInput, assembler: SalaryAssembler = Depends(get_assembler)):
    return assembler.confirm_salary(salary_id, input.confirmedBy)


# 급여 지급 처리
@app.post("/salaries/{salary_id}/pay")
def pay(salary_id: str, assembler: SalaryAssembler = Depends(get_assembler)):
    return assembler.mark_as_paid(salary_id)


# 급여 계산 API (수동 계산 - POST 방식)
@app.post("/manual-calculate")
def manual_calculate(input: ManualPayInput):
    """
    사용자가 직접 입력한 근무 패턴에 기반한 수동 급여 계산 API
    """
    return calculate_manual_pay(input.model_dump())


# 퇴직금 예상액 (1년 미만 근무는 0)
@app.post("/severance-estimate")
def severance_estimate(input: SeveranceInput):
    return {"severancePay": calculate_severance_pay(input.averageMonthlyPay, input.totalWorkDays)}
