from fastapi import APIRouter, HTTPException, Depends, Body
from fastapi.responses import StreamingResponse
from typing import Optional
import io
import logging
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from database import get_database
from services.queries import exam_summary

logger = logging.getLogger(__name__)

router = APIRouter()

HEADERS = [
    'Student Account', 'Earned Points', 'Total Points', 'Score (%)',
    'Base XP', 'Multiplier', 'Final XP', 'Skills Earned', 'Submitted At',
]

def autofit_columns(worksheet):
    for column in worksheet.columns:
        max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
        worksheet.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)

@router.post("/{exam_id}/export")
async def export_exam_results(exam_id: str, account: Optional[str] = Body(None, embed=True), db=Depends(get_database)):
    try:
        if not account:
            raise HTTPException(status_code=401, detail="University account is required")

        exam = await db.exams.find_one({"examId": exam_id})
        if not exam:
            raise HTTPException(status_code=404, detail="Exam not found")

        if exam["uni"] != account:
            raise HTTPException(status_code=403, detail="Only the owning university can export results")

        cursor = db.results.find({"examId": exam_id}).sort("submittedAt", 1)
        results = await cursor.to_list(length=None)

        wb = Workbook()

        ws_results = wb.active
        ws_results.title = "Results"
        ws_results.append(HEADERS)

        for cell in ws_results[1]:
            cell.font = Font(bold=True)
            cell.fill = PatternFill(start_color="E6F3FF", end_color="E6F3FF", fill_type="solid")

        for result in results:
            ws_results.append([
                result["studentAccount"],
                result["earnedPoints"],
                result["totalPoints"],
                round(result["percentageScore"], 2),
                result["baseXP"],
                round(result["difficultyMultiplier"], 4),
                result["finalXP"],
                ", ".join(result.get("earnedSkills", [])),
                result["submittedAt"].strftime("%Y-%m-%d %H:%M"),
            ])

        autofit_columns(ws_results)

        summary = await exam_summary(db, exam_id)
        ws_summary = wb.create_sheet("Summary")
        ws_summary.append(["Exam", exam["title"]])
        ws_summary.append(["Attempts", summary["attempts"]])
        ws_summary.append(["Average Score (%)", summary["averagePercentage"]])
        ws_summary.append(["Highest Score (%)", summary["highestPercentage"]])
        ws_summary.append(["Lowest Score (%)", summary["lowestPercentage"]])
        ws_summary.append(["Average XP", summary["averageXp"]])
        ws_summary.append(["Skill Grant Rate (%)", summary["skillGrantRate"]])
        autofit_columns(ws_summary)

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)

        logger.info(f"Exported {len(results)} results for exam {exam_id}")

        return StreamingResponse(
            buffer,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f"attachment; filename=exam_{exam_id}_results.xlsx"}
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Export error for exam {exam_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to export results")
